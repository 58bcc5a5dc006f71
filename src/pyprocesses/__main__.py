from pyprocesses.launcher import entrypoint

entrypoint()

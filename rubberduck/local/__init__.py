"""
Local package for the Rubber Duck CLI.

This package holds everything that runs on the operator's machine: home
directory resolution, the persistent environment store, merged settings, the
dataserver supervisor and the management console.
"""

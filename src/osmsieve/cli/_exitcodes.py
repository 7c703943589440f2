"""Process exit codes for the osmsieve CLI."""

SUCCESS = 0
RUNTIME_ERROR = 1
USAGE_ERROR = 2

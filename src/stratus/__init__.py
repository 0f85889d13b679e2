import warnings

from boto3.exceptions import PythonDeprecationWarning


def _silence_sdk_warnings() -> None:
    # boto3 warns about interpreters nearing end of support.
    # These clutter the CLI output and are not actionable at runtime.
    warnings.filterwarnings("ignore", category=PythonDeprecationWarning)


_silence_sdk_warnings()

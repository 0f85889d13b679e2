import warnings

from boto3.exceptions import PythonDeprecationWarning

import stratus


def test_sdk_deprecation_warning_is_silenced():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        stratus._silence_sdk_warnings()
        warnings.warn("Python 3.8 is no longer supported", PythonDeprecationWarning)

    assert caught == []

"""
Unit tests and supporting files for biorecords.

The package structure of test_biorecords mirrors the package structure of
biorecords, with one or more test cases per class and sometimes dedicated
cases for modules or helper functions.  When test cases need supporting files
(input text to parse, or expected output for comparison with results) they
refer to a path within test_biorecords/data/<path> where <path> corresponds to
the location of the test case code.  This is handled by TestBase.

test_config.yml at the top of the repository can send test log output to a
file.
"""

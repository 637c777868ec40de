"""
Test suites package.

Keeps `testsuites` importable so page objects, the framework and the
in-process dashboard can be shared across:
  - unit tests (testsuites/unit)
  - page-object tests (testsuites/ui_testing/tests)
  - live browser tests (testsuites/ui_testing/e2e)
"""

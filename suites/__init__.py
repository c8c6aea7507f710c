"""
Test suites package.

`suites` stays importable so that the UI framework
(`suites.ui_testing.framework`) can be used by test code, programmatic runners
(`run_tests.py`) and CI jobs alike.
"""

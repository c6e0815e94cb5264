"""
Build Grader: Automated Build-and-Grade Harness

Unpacks a submission archive, builds it with its Makefile, runs the
resulting artifact against the official and unofficial test corpora,
and reports byte-exact pass/fail results with a CI-usable exit code.
"""

__version__ = "0.1.0"

"""Write, verify and run round-trip checks."""

from tsdsprobe.testing.runner import RoundTripCase, RoundTripRunner, default_cases
from tsdsprobe.testing.verifier import VerificationResult, Verifier
from tsdsprobe.testing.writer import DocumentWriter

__all__ = [
    "DocumentWriter",
    "Verifier",
    "VerificationResult",
    "RoundTripCase",
    "RoundTripRunner",
    "default_cases",
]

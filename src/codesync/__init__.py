"""CodeSync scoring service."""

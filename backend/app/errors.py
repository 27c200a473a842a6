"""Error kinds raised by the tutor services.

Each kind carries the HTTP status it maps to and a message that is safe to
return to the caller. Provider bodies and other diagnostics are logged where
the error is raised and never placed in the message.
"""

from __future__ import annotations


class TutorError(Exception):
	status_code: int = 500

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message


class ValidationError(TutorError):
	status_code = 400


class InvalidId(TutorError):
	status_code = 400

	def __init__(self, message: str = "Invalid session ID") -> None:
		super().__init__(message)


class NotFound(TutorError):
	status_code = 404

	def __init__(self, message: str = "Session not found") -> None:
		super().__init__(message)


class ProviderError(TutorError):
	status_code = 500


class MalformedResponse(TutorError):
	status_code = 500


class ServiceUnavailable(TutorError):
	status_code = 503

"""Error kinds returned by the API.

Every error carries a stable machine-readable ``kind`` plus a human-readable
message; ``main`` renders them as ``{"error": kind, "message": message}``.
"""


class SantaError(Exception):
    status_code = 400

    def __init__(self, kind: str, message: str, status_code: int | None = None, **extra):
        super().__init__(message)
        self.kind = kind
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"error": self.kind, "message": self.message}
        body.update(self.extra)
        return body


class InputError(SantaError):
    status_code = 400


class EligibilityError(SantaError):
    status_code = 403


class ExhaustedError(SantaError):
    status_code = 410


class AuthError(SantaError):
    status_code = 401


class DuplicateError(SantaError):
    status_code = 409

from __future__ import annotations

from typing import Optional


class FetchError(Exception):
    """
    The weather source could not be read.

    Exactly one of `status` (non-success HTTP status) or `cause`
    (transport failure, malformed JSON body) is set.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.status = status
        self.cause = cause


class PersistError(Exception):
    """
    The store rejected the upsert. `detail` carries the store's message.
    """

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class PipelineError(Exception):
    """
    Failure of one push run, tagged with the stage that failed.
    """

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause

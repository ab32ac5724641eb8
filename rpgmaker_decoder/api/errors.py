from fastapi import HTTPException, status

from rpgmaker_decoder.core.errors import DecoderError, NotAProject, SignatureMismatch


_STATUS_BY_ERROR = {
    NotAProject: status.HTTP_404_NOT_FOUND,
    SignatureMismatch: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def to_http_exception(error: DecoderError) -> HTTPException:
    """Translate a decoder error into an HTTP error (400 unless listed above)."""
    status_code = _STATUS_BY_ERROR.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=str(error))

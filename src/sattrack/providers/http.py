"""Minimal asynchronous JSON GET on top of QNetworkAccessManager."""
import json
import logging
import re
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

from PyQt6 import QtCore, QtNetwork

from .base import PendingRequest, ProviderError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_MS = 10_000
USER_AGENT = "SatTrack/1.0"

_API_KEY_RE = re.compile(r"(apiKey=)[^&/]+")

JsonCallback = Callable[[Optional[object], Optional[Exception], Optional[float]], None]


def redact(url: str) -> str:
    return _API_KEY_RE.sub(r"\1***", url)


def http_date_ms(value: bytes) -> Optional[float]:
    """Epoch ms from an RFC 7231 Date header, or None."""
    if not value:
        return None
    try:
        return parsedate_to_datetime(bytes(value).decode("latin-1")).timestamp() * 1000.0
    except (TypeError, ValueError, IndexError):
        return None


def deliver_later(callback, result, error) -> None:
    """Invoke callback on the next event-loop turn."""
    QtCore.QTimer.singleShot(0, lambda: callback(result, error))


class ReplyHandle(PendingRequest):
    def __init__(self, reply: QtNetwork.QNetworkReply):
        self._reply = reply
        # finished replies are deleteLater()'d; never touch them afterwards
        reply.destroyed.connect(self._forget)

    def _forget(self, *_):
        self._reply = None

    def abort(self) -> None:
        if self._reply is not None and self._reply.isRunning():
            self._reply.abort()
        self._reply = None


class JsonHttpClient(QtCore.QObject):
    """GETs JSON documents; each request has a transfer timeout and reports the server Date."""

    def __init__(self, parent: Optional[QtCore.QObject] = None, timeout_ms: int = REQUEST_TIMEOUT_MS):
        super().__init__(parent)
        self.timeout_ms = int(timeout_ms)
        self._nam = QtNetwork.QNetworkAccessManager(self)

    def get(self, url: str, callback: JsonCallback) -> PendingRequest:
        req = QtNetwork.QNetworkRequest(QtCore.QUrl(url))
        req.setTransferTimeout(self.timeout_ms)
        req.setHeader(QtNetwork.QNetworkRequest.KnownHeaders.UserAgentHeader, USER_AGENT)
        req.setRawHeader(b"Accept", b"application/json")
        logger.debug("GET %s", redact(url))

        reply = self._nam.get(req)
        reply.finished.connect(lambda: self._on_finished(url, reply, callback))
        return ReplyHandle(reply)

    def _on_finished(self, url: str, reply: QtNetwork.QNetworkReply, callback: JsonCallback) -> None:
        try:
            server_ms = http_date_ms(reply.rawHeader(b"Date").data())
            err = reply.error()
            if err != QtNetwork.QNetworkReply.NetworkError.NoError:
                status = reply.attribute(QtNetwork.QNetworkRequest.Attribute.HttpStatusCodeAttribute)
                detail = f"HTTP {status}" if status else reply.errorString()
                callback(None, ProviderError(f"{redact(url)}: {detail}"), server_ms)
                return
            body = bytes(reply.readAll().data())
            try:
                payload = json.loads(body.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                callback(None, ProviderError(f"{redact(url)}: malformed JSON ({e})"), server_ms)
                return
            callback(payload, None, server_ms)
        finally:
            reply.deleteLater()

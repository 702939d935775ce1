# cafe/utils/retry.py
import smtplib
import socket

import redis
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

# bledy transportu, ktore maja sens przy ponowieniu (odrzucony adres juz nie)
TRANSIENT_SMTP_ERRORS = (
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
    socket.timeout,
    ConnectionError,
)


def smtp_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(TRANSIENT_SMTP_ERRORS),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )

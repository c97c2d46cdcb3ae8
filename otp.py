import logging
import secrets

import config

logger = logging.getLogger(__name__)


class OtpSender:
    """Issues one-time codes and delivers them to a phone number."""

    code_length = 6

    def generate(self) -> str:
        return "".join(secrets.choice("0123456789") for _ in range(self.code_length))

    def send(self, destination: str, code: str) -> None:
        raise NotImplementedError


class FixedOtpSender(OtpSender):
    """Always issues the configured test code and only logs the delivery."""

    def __init__(self, code: str = config.TEST_OTP):
        self.code = code

    def generate(self) -> str:
        return self.code

    def send(self, destination: str, code: str) -> None:
        logger.info("OTP for %s issued (no SMS delivery configured)", mask_mobile(destination))


_sender: OtpSender = FixedOtpSender()


def get_otp_sender() -> OtpSender:
    return _sender


def mask_mobile(mobile: str) -> str:
    if not mobile:
        return ""
    visible = mobile[-4:]
    return "*" * max(len(mobile) - 4, 0) + visible

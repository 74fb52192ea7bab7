"""Failure notifications through the system `mail` command."""

import asyncio
import shutil

from loguru import logger


class NotificationError(Exception):
    """Raised when a notification could not be dispatched."""


class MailCommandNotifier:
    """Pipes the message body into `mail -s <subject> <recipient>`.

    Needs a configured local mail transport (e.g. postfix or msmtp).
    """

    def __init__(self, mail_binary: str = "mail", timeout_s: float = 60.0) -> None:
        self.mail_binary = mail_binary
        self.timeout_s = timeout_s

    async def send(self, recipient: str, subject: str, body: str) -> None:
        mail_path = shutil.which(self.mail_binary)
        if mail_path is None:
            raise NotificationError("Mail command not found, skipping email notification")

        logger.debug("Sending email notification to: {}", recipient)
        try:
            proc = await asyncio.create_subprocess_exec(
                mail_path,
                "-s",
                subject,
                recipient,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await asyncio.wait_for(
                proc.communicate(body.encode("utf-8")),
                timeout=self.timeout_s,
            )
        except TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise NotificationError(f"Mail command timed out after {self.timeout_s}s") from e
        except OSError as e:
            raise NotificationError(f"Failed to run mail command: {e}") from e

        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise NotificationError(
                f"Mail command exited with code {proc.returncode}: {detail or 'no output'}"
            )

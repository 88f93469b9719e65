"""Root of the fakecandy exception tree."""


class FakecandyError(Exception):
    """
    An error with two audiences.

    `str(error)` is `user_message`, the one line the CLI prints.
    `technical_message` goes to the logs and keeps the details an operator
    needs (channel numbers, peers, raw bytes). `recovery_hint`, when set,
    is printed under the message.

    `recoverable` is True for failures scoped to one request or one
    command: a listener that catches one keeps serving.
    """

    def __init__(
        self,
        user_message: str,
        technical_message: str | None = None,
        recoverable: bool = False,
        recovery_hint: str | None = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message if technical_message is not None else user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

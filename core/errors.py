"""Rule violation errors raised by the rules engine."""

NOT_YOUR_TURN = "NOT_YOUR_TURN"
WRONG_PHASE = "WRONG_PHASE"
CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
ILLEGAL_PLAY = "ILLEGAL_PLAY"
EMPTY_DISCARD = "EMPTY_DISCARD"


class RuleViolation(ValueError):
    """A caller asked for a move the rules do not allow."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

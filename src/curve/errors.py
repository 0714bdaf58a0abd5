"""Program error kinds.

Each class carries a stable numeric ``code`` so a host can report a single
terminal error per invocation without depending on the message text.
"""


class CurveProgramError(Exception):
    code = 0


class TruncatedInstruction(CurveProgramError):
    code = 1


class UnknownOpcode(CurveProgramError):
    code = 2


class NotEnoughAccounts(CurveProgramError):
    code = 3


class UninitializedAccount(CurveProgramError):
    code = 4


class AccountAlreadyInitialized(CurveProgramError):
    code = 5


class AddressMismatch(CurveProgramError):
    code = 6


class OwnerMismatch(CurveProgramError):
    code = 7


class InvalidAmount(CurveProgramError):
    code = 8


class ArithmeticOverflow(CurveProgramError):
    code = 9


class InvalidLayout(CurveProgramError):
    code = 10


class InvalidState(CurveProgramError):
    code = 11


class AccountNotWritable(CurveProgramError):
    code = 12

class CustodyError(Exception):
    pass


class AccountNotFound(CustodyError):
    pass


class AccountAlreadyExists(CustodyError):
    pass


class AccountFrozen(CustodyError):
    pass


class InsufficientFunds(CustodyError):
    pass


class MissingAuthority(CustodyError):
    pass


class SupplyOverflow(CustodyError):
    pass

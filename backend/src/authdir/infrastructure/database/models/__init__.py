from .identity import OperatorModel, PersonModel, SessionModel
from .recovery import AccountRecoveryFileModel, AccountRecoveryModel, DocumentTypeModel

__all__ = [
    "PersonModel",
    "OperatorModel",
    "SessionModel",
    "DocumentTypeModel",
    "AccountRecoveryModel",
    "AccountRecoveryFileModel",
]

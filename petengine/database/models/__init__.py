"""
ORM row models. Importing this package registers every table on
`petengine.core.database.Base.metadata`.
"""

from petengine.database.models.challenge import ChallengeRow, UserChallengeRow
from petengine.database.models.wallet import WalletRow

__all__ = ["ChallengeRow", "UserChallengeRow", "WalletRow"]

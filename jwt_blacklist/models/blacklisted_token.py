from sqlalchemy import Column, Integer, BigInteger, String
from jwt_blacklist.database import Base

class BlacklistedToken(Base):
    __tablename__ = "blacklisted_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String, unique=True, index=True, nullable=False)
    expires_at = Column(BigInteger, index=True, nullable=False)  # epoch milliseconds

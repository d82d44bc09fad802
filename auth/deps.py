import logging
import os
import time

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

load_dotenv()

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# .env から取得。トークン発行側と同じ秘密鍵を設定すること
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")


def create_access_token(user_id: str, expires_in: int = 60 * 60 * 24, secret: str | None = None) -> str:
    """開発・テスト用のトークン発行（sub にユーザーID）"""
    payload = {
        "sub": user_id,
        "role": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    key = secret or JWT_SECRET
    if not key:
        raise RuntimeError("JWT_SECRET is not set in environment variables")
    return jwt.encode(payload, key, algorithm=JWT_ALGORITHM)


def decode_user_id(token: str, secret: str | None = None) -> str:
    """
    JWT を検証して sub（ユーザーID）を返す
    秘密鍵が未設定なら空鍵で署名されたトークンを通さないよう常に拒否する
    """
    key = secret or JWT_SECRET
    if not key:
        logger.error("JWT_SECRET is not set; rejecting all bearer tokens")
        raise JWTError("Token verification is not configured")
    payload = jwt.decode(
        token,
        key,
        algorithms=[JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Missing subject claim")
    return str(user_id)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_user_id(credentials.credentials)
    except JWTError as e:
        logger.info("JWT verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid or expired JWT token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

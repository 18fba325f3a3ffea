import jwt
from datetime import datetime, timedelta, timezone
from app.core.config import settings

def generate_test_jwt(user_id=1, email="testuser@example.com", expires_delta=timedelta(hours=1),
                      secret=None, claim="userId"):
    now = datetime.now(timezone.utc)
    payload = {
        claim: user_id if claim == "userId" else str(user_id),
        "email": email,
        "exp": now + expires_delta,
        "iat": now,
    }
    token = jwt.encode(payload, secret or settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token

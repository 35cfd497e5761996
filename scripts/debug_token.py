"""Decode a ShipDesk access token: python -m scripts.debug_token <token>"""
import sys

import jwt

from shipdesk.auth.config import auth_config


def decode(token: str) -> dict:
    return jwt.decode(
        token,
        auth_config.secret,
        algorithms=[auth_config.algorithm],
        audience=auth_config.audience,
    )


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python -m scripts.debug_token <token>")
        sys.exit(2)

    token = sys.argv[1].removeprefix("Bearer ").strip()
    try:
        decoded = decode(token)
        print("✅ Token is valid!")
        print("Decoded payload:")
        print(decoded)
    except jwt.ExpiredSignatureError:
        print("❌ Token has expired.")
        sys.exit(1)
    except jwt.InvalidTokenError as e:
        print(f"❌ Invalid token: {e}")
        sys.exit(1)

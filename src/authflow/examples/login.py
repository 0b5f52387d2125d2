"""
Log in against an OAuth provider with the system browser.

Set AUTHFLOW_BASE_URL, AUTHFLOW_AUTHORIZE_ENDPOINT, AUTHFLOW_TOKEN_ENDPOINT,
AUTHFLOW_CLIENT_ID, AUTHFLOW_REDIRECT_URI (an http://127.0.0.1:<port>/...
loopback URI registered with the provider) and AUTHFLOW_SCOPE, either in the
environment or in a .env file.

    python -m authflow.examples.login
"""

import asyncio
import logging
import sys

from authflow.client import AuthFlowClient
from authflow.models.config import AuthConfig
from authflow.models.errors import AuthFlowError
from authflow.sessions.loopback import LoopbackBrowserSession


async def main() -> int:
    try:
        config = AuthConfig.from_env()
        browser = LoopbackBrowserSession.from_redirect_uri(config.redirect_uri)
    except AuthFlowError as e:
        logging.error(f"Configuration error: {e}")
        return 2

    async with AuthFlowClient(
        config,
        browser,
        on_state_change=lambda state: logging.info(f"State: {state.status.value}"),
    ) as client:
        try:
            token = await client.login()
        except AuthFlowError as e:
            logging.error(f"Login failed ({type(e).__name__}): {e}")
            return 1

    logging.info(f"Token type: {token.token_type}, expires in: {token.expires_in}")
    logging.info(f"Additional fields: {sorted(token.extra)}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(asyncio.run(main()))

"""CLI for saving one image file into the local shared photo library"""

import argparse
import asyncio
import sys

from loguru import logger

from stargallery.config import settings
from stargallery.domain.channel import MethodCall
from stargallery.domain.permissions import AuthorizationStatus, PermissionPrompt
from stargallery.permissions.consent import ConsentPermissionService
from stargallery.platforms.capabilities import resolve_capabilities
from stargallery.wiring import build_channel


def ask_user(permissions: ConsentPermissionService, prompt: PermissionPrompt) -> None:
    answer = input("Allow saving images to your photo library? [y/N/limited] ").strip().lower()
    if answer in ("y", "yes"):
        status = AuthorizationStatus.AUTHORIZED
    elif answer == "limited":
        status = AuthorizationStatus.LIMITED
    else:
        status = AuthorizationStatus.DENIED
    permissions.resolve(prompt.id, status)


async def main(path: str, platform: str, sdk_version: int, answer: str | None) -> int:
    capabilities = resolve_capabilities(platform, sdk_version)
    permissions = ConsentPermissionService(
        status=settings.initial_permission_status,
        reprompt_after_denial=capabilities.reprompts_after_denial,
    )

    loop = asyncio.get_running_loop()
    if answer:
        permissions.on_prompt = lambda prompt: permissions.resolve(
            prompt.id, AuthorizationStatus(answer)
        )
    else:
        permissions.on_prompt = lambda prompt: loop.run_in_executor(
            None, ask_user, permissions, prompt
        )

    channel = build_channel(settings=settings, capabilities=capabilities, permissions=permissions)
    response = await channel.handle(MethodCall(method="saveImage", arguments={"path": path}))

    channel.close()

    error = response.error
    if error is None:
        print(f"Saved {path}")
        return 0
    print(f"{error.code}: {error.message} {error.details or ''}")
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--path", type=str, required=True, help="Image file to save")
    parser.add_argument(
        "--platform",
        type=str,
        required=False,
        help="Platform to emulate (android or ios)",
        default=settings.platform,
    )
    parser.add_argument(
        "--sdk-version",
        type=int,
        required=False,
        help="OS version of the platform",
        default=settings.sdk_version,
    )
    parser.add_argument(
        "--answer",
        type=str,
        required=False,
        choices=["authorized", "limited", "denied"],
        help="Answer permission prompts without asking",
    )

    args = parser.parse_args()
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    sys.exit(
        asyncio.run(
            main(
                path=args.path,
                platform=args.platform,
                sdk_version=args.sdk_version,
                answer=args.answer,
            )
        )
    )

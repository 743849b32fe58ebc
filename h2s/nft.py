"""nftables backend: refresh set elements in one atomic transaction."""

import logging
import subprocess
from dataclasses import dataclass
from typing import Literal

from h2s.errors import ApplyError
from h2s.models import SetTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementStatement:
    """A single ``add element`` / ``delete element`` line of a transaction."""

    action: Literal["add", "delete"]
    target: SetTarget
    address: str

    def render(self) -> str:
        return f"{self.action} element {self.target} {{ {self.address} }}"


def build_refresh_transaction(
    target: SetTarget, address: str
) -> list[ElementStatement]:
    """Return the add → delete → add statements that refresh *address*.

    Adding an element that already exists leaves its timeout untouched,
    so the element is deleted and added again.  The leading add makes
    the delete valid when the element was not in the set yet.
    """
    return [
        ElementStatement("add", target, address),
        ElementStatement("delete", target, address),
        ElementStatement("add", target, address),
    ]


def render_transaction(statements: list[ElementStatement]) -> str:
    """Render statements as an ``nft -f`` script."""
    return "".join(f"{s.render()}\n" for s in statements)


def apply_transaction(script: str, nft_binary: str = "nft") -> None:
    """Feed *script* to ``nft -f -``, which applies it atomically.

    Raises:
        subprocess.CalledProcessError: If ``nft`` exits non-zero.
        OSError: If ``nft`` cannot be started.
    """
    logger.debug("Applying nft transaction:\n%s", script.rstrip())
    subprocess.run(
        [nft_binary, "-f", "-"],
        input=script,
        capture_output=True,
        text=True,
        check=True,
    )


class SetSynchronizer:
    """Keeps addresses present in one set with a fresh timeout.

    Args:
        target: The set to write to.
        nft_binary: Path (or bare name for $PATH lookup) of ``nft``.
    """

    def __init__(self, target: SetTarget, nft_binary: str = "nft") -> None:
        self.target = target
        self.nft_binary = nft_binary

    def refresh(self, address: str) -> None:
        """Add *address* to the set, resetting its timeout if present.

        All three statements go to ``nft`` in a single invocation, so the
        element is never observed missing.

        Raises:
            ApplyError: If ``nft`` rejects the transaction or cannot run.
        """
        script = render_transaction(build_refresh_transaction(self.target, address))
        try:
            apply_transaction(script, self.nft_binary)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or (
                f"nft exited with status {exc.returncode}"
            )
            raise ApplyError(self.target, address, detail) from exc
        except OSError as exc:
            raise ApplyError(
                self.target, address, f"could not run {self.nft_binary}: {exc}"
            ) from exc

"""Token transfers from execution logs — pluggable strategy.

The runtime does not log token movements in a stable grammar, so the default
parser returns nothing. Implementations keep the `parse(logs, account_keys)`
signature so consumers do not care which one is installed.
"""

from abc import ABC, abstractmethod

from solinspect.decoder.utils.logs import LogFrame, split_invocations
from solinspect.domain.models.transaction import TokenTransfer


class LogTransferParser(ABC):
    """Strategy interface for reconstructing token transfers from log lines."""

    @abstractmethod
    def parse(self, logs: list[str], account_keys: list[str]) -> list[TokenTransfer]:
        """Return token transfers found in the logs, in log order."""


class NullLogTransferParser(LogTransferParser):
    """Reference behaviour: no log-based token transfers."""

    def parse(self, logs: list[str], account_keys: list[str]) -> list[TokenTransfer]:
        return []


class TokenLogScanner(LogTransferParser):
    """Walks invocation frames and offers candidate lines to overridable hooks.

    Subclasses override `parse_transfer_line` and/or `parse_token_transfer_event`;
    both return None here, so the scanner itself yields no transfers.
    """

    def parse(self, logs: list[str], account_keys: list[str]) -> list[TokenTransfer]:
        transfers: list[TokenTransfer] = []
        for frame in split_invocations(logs):
            for line in frame.lines:
                if "Transfer" in line and "amount:" in line:
                    transfer = self.parse_transfer_line(line, frame, account_keys)
                    if transfer is not None:
                        transfers.append(transfer)
                if "Token:Transfer" in line:
                    transfer = self.parse_token_transfer_event(line, frame, account_keys)
                    if transfer is not None:
                        transfers.append(transfer)
        return transfers

    def parse_transfer_line(self, line: str, frame: LogFrame, account_keys: list[str]) -> TokenTransfer | None:
        return None

    def parse_token_transfer_event(self, line: str, frame: LogFrame, account_keys: list[str]) -> TokenTransfer | None:
        return None

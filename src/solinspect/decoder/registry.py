"""ProgramRegistry — program address → display name."""

SYSTEM_PROGRAM = "11111111111111111111111111111111"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCQbphWkTg"
ASSOCIATED_TOKEN_PROGRAM = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
COMPUTE_BUDGET_PROGRAM = "ComputeBudget111111111111111111111111111111"

SYSTEM_PROGRAM_NAME = "System Program"
TOKEN_PROGRAM_NAME = "Token Program"
TOKEN_2022_PROGRAM_NAME = "Token-2022 Program"
COMPUTE_BUDGET_NAME = "Compute Budget"

KNOWN_PROGRAMS: dict[str, str] = {
    SYSTEM_PROGRAM: SYSTEM_PROGRAM_NAME,
    TOKEN_PROGRAM: TOKEN_PROGRAM_NAME,
    TOKEN_2022_PROGRAM: TOKEN_2022_PROGRAM_NAME,
    ASSOCIATED_TOKEN_PROGRAM: "Associated Token Account",
    COMPUTE_BUDGET_PROGRAM: COMPUTE_BUDGET_NAME,
    "Config1111111111111111111111111111111111111": "Config Program",
    "Stake11111111111111111111111111111111111111": "Stake Program",
    "Vote111111111111111111111111111111111111111": "Vote Program",
    "AddressLookupTab1e1111111111111111111111111": "Address Lookup Table",
    "BPFLoaderUpgradeab1e11111111111111111111111": "BPF Loader Upgradeable",
    "BPFLoader2111111111111111111111111111111111": "BPF Loader",
    "BPFLoader1111111111111111111111111111111111": "BPF Loader (Legacy)",
    "Ed25519SigVerify111111111111111111111111111": "Ed25519 SigVerify",
    "KeccakSecp256k11111111111111111111111111111": "Secp256k1 Program",
    "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr": "Memo Program",
    "Memo1UhkJRfHyvLMcVucJwxXeuD728EqVDDwQDxFMNo": "Memo Program (v1)",
}


class ProgramRegistry:
    """Lookup table of well-known program ids. Unknown ids resolve to None, never an error."""

    def __init__(self, programs: dict[str, str] | None = None) -> None:
        self._programs: dict[str, str] = dict(KNOWN_PROGRAMS if programs is None else programs)

    def register(self, program_id: str, name: str) -> None:
        self._programs[program_id] = name

    def name(self, program_id: str) -> str | None:
        return self._programs.get(program_id)


def build_default_registry() -> ProgramRegistry:
    """Create a ProgramRegistry with the built-in native and SPL programs."""
    return ProgramRegistry()


_default_registry = build_default_registry()


def get_program_name(program_id: str) -> str | None:
    return _default_registry.name(program_id)


# Well-known SPL mints, used to label token holdings
KNOWN_TOKENS: dict[str, str] = {
    "So11111111111111111111111111111111111111112": "Wrapped SOL",
    "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v": "USDC",
    "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB": "USDT",
    "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263": "BONK",
}


def get_token_name(mint: str) -> str | None:
    return KNOWN_TOKENS.get(mint)

from enum import Enum


class Network(str, Enum):
    """Solana clusters the inspector can target. Values lowercase to match env/config conventions."""

    MAINNET = "mainnet"
    DEVNET = "devnet"
    TESTNET = "testnet"

    @property
    def url(self) -> str:
        return _NETWORK_URLS[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    def next(self) -> "Network":
        members = list(Network)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> "Network":
        members = list(Network)
        return members[(members.index(self) - 1) % len(members)]


_NETWORK_URLS: dict[Network, str] = {
    Network.MAINNET: "https://api.mainnet-beta.solana.com",
    Network.DEVNET: "https://api.devnet.solana.com",
    Network.TESTNET: "https://api.testnet.solana.com",
}

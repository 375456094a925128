from pydantic_settings import BaseSettings, SettingsConfigDict

from solinspect.domain.enums import Network


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SOLINSPECT_", env_file=".env", extra="ignore")

    network: Network = Network.MAINNET
    rpc_url: str = ""  # overrides the network's public endpoint when set
    commitment: str = "confirmed"
    max_supported_transaction_version: int = 0
    recent_signature_limit: int = 10
    log_level: str = "INFO"

    @property
    def resolved_rpc_url(self) -> str:
        return self.rpc_url or self.network.url

    def transaction_request_config(self) -> dict:
        """Options for getTransaction; jsonParsed gives human-readable instructions where the node can."""
        return {
            "encoding": "jsonParsed",
            "commitment": self.commitment,
            "maxSupportedTransactionVersion": self.max_supported_transaction_version,
        }

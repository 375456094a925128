from dependency_injector import containers, providers

from solinspect.config import Settings
from solinspect.decoder.account_data import AccountAssembler
from solinspect.decoder.assembler import TransactionAssembler
from solinspect.decoder.extractors.log_transfers import NullLogTransferParser
from solinspect.decoder.opcodes import OpcodeClassifier
from solinspect.decoder.registry import build_default_registry


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings)

    program_registry = providers.Singleton(build_default_registry)

    opcode_classifier = providers.Singleton(OpcodeClassifier)

    log_transfer_parser = providers.Singleton(NullLogTransferParser)

    transaction_assembler = providers.Factory(
        TransactionAssembler,
        registry=program_registry,
        classifier=opcode_classifier,
        log_transfer_parser=log_transfer_parser,
    )

    account_assembler = providers.Factory(
        AccountAssembler,
        registry=program_registry,
        recent_limit=settings.provided.recent_signature_limit,
    )

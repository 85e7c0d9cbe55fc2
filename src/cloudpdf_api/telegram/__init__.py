from cloudpdf_api.telegram.client import TelegramClient

__all__ = ["TelegramClient"]

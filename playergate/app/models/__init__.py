from playergate.app.models.account import Account
from playergate.app.models.security_question import SecurityQuestion
from playergate.app.models.device import Device
from playergate.app.models.progress import GameProgress

__all__ = ["Account", "SecurityQuestion", "Device", "GameProgress"]

from core.services.directory.service import DirectoryOption, DirectoryService

__all__ = ["DirectoryService", "DirectoryOption"]

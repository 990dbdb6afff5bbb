from subscribe_for_data.config.runtime import EngineSettings

__all__ = ["EngineSettings"]

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Key-value storage backing the account analytics (SQLModel engine URL)
    database_url: str = "sqlite:///factionboard.db"
    database_echo: bool = False

    # Storage keys of the three persisted analytics collections
    accounts_storage_key: str = "faction_accounts"
    statuses_storage_key: str = "account_statuses"
    sessions_storage_key: str = "account_sessions"

    # Member "last seen" labels
    online_label: str = "Сейчас"
    last_seen_format: str = "%d.%m.%Y, %H:%M:%S"

    # Analytics defaults
    session_history_limit: int = 50
    playtime_default_days: int = 7

    # Activity log defaults
    activity_log_limit: int = 100
    # Extra activity actions, comma separated "action=label" pairs
    extra_activity_actions: str = ""

    # Logging
    log_level: str = "INFO"
    log_file: str = ""
    log_rotation: str = "10 MB"

    @property
    def extra_activity_action_labels(self) -> dict[str, str]:
        """Parse extra activity actions into an action -> label mapping"""
        labels: dict[str, str] = {}
        for pair in self.extra_activity_actions.split(","):
            action, _, label = pair.partition("=")
            action = action.strip()
            if action:
                labels[action] = label.strip() or action
        return labels

    @property
    def is_file_logging_enabled(self) -> bool:
        """Check whether log output should also go to a file"""
        return bool(self.log_file)


settings = Settings()

"""
Canada Post plugin settings, persisted per store through SettingService.
"""
from storefront.services.setting_service import SettingsBase


class CanadaPostSettings(SettingsBase):
    # "username:password" pair issued by Canada Post, sent as HTTP basic auth
    api_key: str = ""
    customer_number: str = ""
    use_sandbox: bool = False

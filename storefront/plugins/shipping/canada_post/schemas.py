"""
Canada Post admin configuration form.
"""
from storefront.plugins.shipping.canada_post.settings import CanadaPostSettings
from storefront.schemas.common import StoreScopedConfigurationModel


class ConfigurationModel(StoreScopedConfigurationModel):
    api_key: str = ""
    api_key_override_for_store: bool = False

    customer_number: str = ""
    customer_number_override_for_store: bool = False

    use_sandbox: bool = False
    use_sandbox_override_for_store: bool = False

    @classmethod
    def from_settings(cls, settings: CanadaPostSettings) -> "ConfigurationModel":
        return cls(
            api_key=settings.api_key,
            customer_number=settings.customer_number,
            use_sandbox=settings.use_sandbox,
        )

    def apply_to(self, settings: CanadaPostSettings) -> None:
        settings.api_key = self.api_key
        settings.customer_number = self.customer_number
        settings.use_sandbox = self.use_sandbox

"""Tests for settings-driven override hooks."""

from featurizer.config import Settings
from featurizer.services.feature_service import FeatureService
from featurizer.services.overrides import settings_override


class TestSettingsOverride:
    def test_no_kill_switch(self):
        assert settings_override(Settings()) is None

    def test_global_kill_switch(self):
        hook = settings_override(Settings(kill_switch=True))
        assert hook("hiveit", "login", "sso") is False
        assert hook("acme", "billing", "") is False

    def test_vendor_kill_switch(self):
        hook = settings_override(Settings(kill_switch_vendors="hiveit, legacy"))
        assert hook("hiveit", "login", "sso") is False
        assert hook("legacy", "login", "") is False
        assert hook("acme", "login", "sso") is None

    def test_global_wins_over_vendor_list(self):
        hook = settings_override(Settings(kill_switch=True, kill_switch_vendors="hiveit"))
        assert hook("acme", "login", "sso") is False

    def test_vendor_names_are_normalized(self):
        hook = settings_override(Settings(kill_switch_vendors="HiveIT,Legacy Apps"))
        assert hook("hiveit", "login", "sso") is False
        assert hook("legacyapps", "login", "") is False

    def test_unusable_vendor_names_ignored(self):
        assert settings_override(Settings(kill_switch_vendors="!!, ??")) is None


class TestKillSwitchThroughService:
    async def test_mixed_case_vendor_disables_enabled_flag(self, catalog, tenant):
        await FeatureService(catalog).register("hiveit", "login", "sso")
        await FeatureService(catalog).enable("hiveit", "login", "sso", tenant=tenant)

        service = FeatureService(catalog, override=settings_override(Settings(kill_switch_vendors="HiveIT")))
        assert await service.is_enabled("HiveIT", "login", "sso", tenant=tenant) is False

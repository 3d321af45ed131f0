from core.config import MIB, REQUIRED_COLUMNS, DashboardSettings, load_settings, normalize_settings


def test_defaults():
    settings = normalize_settings({})

    assert settings == DashboardSettings()
    assert settings.max_upload_bytes == 10 * MIB
    assert settings.max_upload_mb == 10
    assert settings.required_columns == REQUIRED_COLUMNS


def test_bad_values_fall_back():
    settings = normalize_settings(
        {
            "max_upload_bytes": "lots",
            "log_level": "chatty",
            "breakdown_decimals": 99,
            "placeholder_products": [],
        }
    )

    assert settings.max_upload_bytes == 10 * MIB
    assert settings.log_level == "INFO"
    assert settings.breakdown_decimals == 6
    assert settings.placeholder_products == ("Product A", "Product B", "Product C")


def test_extra_required_columns_keep_base_set():
    settings = normalize_settings({"required_columns": ["region", "date"]})

    assert settings.required_columns == REQUIRED_COLUMNS + ("region",)


def test_load_settings_from_env():
    settings = load_settings({"SALES_DASHBOARD_MAX_UPLOAD_MB": "2.5", "SALES_DASHBOARD_LOG_LEVEL": "debug"})

    assert settings.max_upload_bytes == int(2.5 * MIB)
    assert settings.log_level == "DEBUG"


def test_load_settings_ignores_garbage_env():
    assert load_settings({"SALES_DASHBOARD_MAX_UPLOAD_MB": "ten"}) == DashboardSettings()


def test_load_settings_ignores_infinite_env():
    assert load_settings({"SALES_DASHBOARD_MAX_UPLOAD_MB": "inf"}) == DashboardSettings()
    assert load_settings({"SALES_DASHBOARD_MAX_UPLOAD_MB": "nan"}) == DashboardSettings()

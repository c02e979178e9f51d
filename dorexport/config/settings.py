"""Export settings registration."""

from dorexport.config import env
from dorexport.core.logger import setup_logger
from dorexport.core.settings_registry import (
    NumberField,
    PasswordField,
    SelectField,
    TextField,
    register_settings,
)

logger = setup_logger(__name__)

# Log bootstrap configuration values at DEBUG level
logger.debug("Bootstrap configuration:")
for key in ['CONFIG_DIR', 'LOG_DIR', 'DEBUG', 'ENABLE_LOGGING', 'LOG_LEVEL']:
    logger.debug("  %s: %s", key, getattr(env, key))


def _profile_options():
    from dorexport.export.profiles import list_profiles

    return [
        {"value": profile.name, "label": profile.name, "description": profile.description}
        for profile in list_profiles()
    ]


_VERIFY_OPTIONS = [
    {"value": "", "label": "Profile default"},
    {"value": "true", "label": "Always verify"},
    {"value": "false", "label": "Never verify"},
]


@register_settings("export", "Export", order=0)
def export_settings():
    """Destination, manifest and workflow API settings."""
    return [
        TextField(
            key="DESTINATION",
            label="Export Root",
            description="Directory under which the sharded object folders are created.",
            default="/tmp",
            placeholder="/assembly",
            required=True,
        ),
        TextField(
            key="TEMP_DESTINATION",
            label="Manifest Copy Directory",
            description="If set, a copy of the manifest is also written here as dor_export_{id}.xml.",
            default="",
        ),
        TextField(
            key="METADATA_FILE_NAME",
            label="Manifest File Name",
            description="File name of the content manifest. Leave empty to use the profile default.",
            default="",
            placeholder="stubContentMetadata.xml",
        ),
        SelectField(
            key="EXPORT_PROFILE",
            label="Export Profile",
            description="Selects content type mapping, folder layout, companion files and verification.",
            options=_profile_options,
            default="stanford",
        ),
        SelectField(
            key="VERIFY_INTEGRITY",
            label="Verify Copies",
            description="Compare checksums of every copied file with its source.",
            options=_VERIFY_OPTIONS,
            default="",
        ),
        TextField(
            key="API_BASE_URL",
            label="Workflow API URL",
            description="Base URL of the repository API. The object id and workflow name are appended.",
            default="http://example.com/",
            required=True,
        ),
        TextField(
            key="ASSEMBLY_WF",
            label="Workflow Name",
            description="Workflow to start after the export has been written.",
            default="assemblyWF",
        ),
        TextField(
            key="API_USERNAME",
            label="API Username",
            description="Optional HTTP Basic username.",
            default="",
        ),
        PasswordField(
            key="API_PASSWORD",
            label="API Password",
            description="Optional HTTP Basic password.",
            default="",
        ),
        NumberField(
            key="DELAY",
            label="Delay Before Notification",
            description="Seconds to wait between writing the export and calling the workflow API.",
            default=0,
            min_value=0,
        ),
        NumberField(
            key="HTTP_TIMEOUT",
            label="API Timeout",
            description="Seconds to wait for the workflow API to respond.",
            default=30,
            min_value=1,
        ),
    ]

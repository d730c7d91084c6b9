"""Default configuration template.

This template is written to ~/.config/gmcli/config.toml
when running `gmcli config init`.
"""

CONFIG_TEMPLATE = """\
# gmcli configuration

[defaults]
# account = "personal"
include_quote = true

# Add your Gmail accounts below:
#
# [accounts.personal]
# email = "me@gmail.com"
# client_id = "xxxxxx.apps.googleusercontent.com"
#
# Get client_id and client_secret from Google Cloud Console OAuth credentials
# (application type "Desktop app").
# For client_secret, use the GMCLI_CLIENT_SECRET environment variable.
#
# After adding an account, authenticate with:
#   gmcli config auth --account personal
"""

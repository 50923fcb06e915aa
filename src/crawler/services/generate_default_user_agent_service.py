import platform

from agentlint.core.managers.config_manager import config_manager


def generate_default_user_agent() -> str:
    """
    Generates the identifying user agent string based on the operating system
    and the product name/version retrieved from settings.json.

    Returns:
        str: The constructed User-Agent string.
    """
    os_name = platform.system()

    # Determine the OS part of the User Agent string
    if os_name == "Windows":
        os_part = "Windows NT 10.0; Win64; x64"
    elif os_name == "Darwin":  # macOS
        os_part = "Macintosh; Intel Mac OS X 10_15_7"
    elif os_name == "Linux":
        os_part = "X11; Linux x86_64"
    else:
        os_part = "Unknown OS"

    product = config_manager.get_nested("fetch.user_agent.product", "AgentLint")
    version = config_manager.get_nested("fetch.user_agent.version", "0.1.0")

    return f"{product}/{version} (compatible; agent-readability audit; {os_part})"

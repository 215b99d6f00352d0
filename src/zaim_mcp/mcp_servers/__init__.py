"""Built-in MCP server modules.

Submodules are not imported here: each registers its tools at import time,
and importing them from the package would register them twice when the
module is launched with ``python -m``. Import the server directly::

    from zaim_mcp.mcp_servers import zaim_server
"""

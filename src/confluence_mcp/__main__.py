from confluence_mcp.cli import main

main()

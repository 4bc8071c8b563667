#!/usr/bin/env python3
"""
Server startup script with command line overrides.
"""

import sys
import argparse

from map_orchestrator.config import get_settings


def main():
    """Main startup function"""
    parser = argparse.ArgumentParser(description="Map Orchestration Engine Server")
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind to (overrides config)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind to (overrides config)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload (overrides config)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (overrides config)"
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="List the enabled tools and exit"
    )

    args = parser.parse_args()

    if args.list_tools:
        from map_orchestrator.tools.declarations import TOOL_DECLARATIONS
        print("Enabled tools:")
        for spec in TOOL_DECLARATIONS:
            if spec.enabled:
                print(f"  - {spec.name.value}")
        return

    try:
        settings = get_settings()
    except Exception as e:
        print(f"✗ Failed to load configuration: {e}")
        sys.exit(1)

    # Apply command line overrides
    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port
    if args.reload:
        settings.reload = True
    if args.debug:
        settings.debug = True

    print(f"🚀 Starting {settings.app_name} v{settings.app_version}")
    print(f"   Environment: {settings.environment.value}")
    print(f"   Host: {settings.host}")
    print(f"   Port: {settings.port}")
    print(f"   Debug: {settings.debug}")
    print(f"   Reload: {settings.reload}")
    print(f"   Log Level: {settings.log_level.value}")

    import uvicorn

    uvicorn.run(
        "map_orchestrator.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.value.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()

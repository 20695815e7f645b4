#!/usr/bin/env python3
"""Generate bearer tokens for manual API testing.

Usage: python scripts/generate_test_token.py [email] [staff|manager|admin]
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.deps import issue_smoke_token  # noqa: E402
from src.core.auth import Role  # noqa: E402

email = sys.argv[1] if len(sys.argv) > 1 else "admin@metabev.com"
role = Role(sys.argv[2]) if len(sys.argv) > 2 else Role.ADMIN

print(f"{role.value.title()} token for {email}:\n{issue_smoke_token(email, role=role)}")

#!/usr/bin/env python3
"""按规则迁移 Native 设计属性并提交到目标分支。"""

from __future__ import annotations

from propfix.app import main

if __name__ == "__main__":
    raise SystemExit(main())

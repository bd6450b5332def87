#!/usr/bin/env python3

from __future__ import annotations

from venuegraph.ui.cli import entrypoint, main

__all__ = ["entrypoint", "main"]


if __name__ == "__main__":
    entrypoint()

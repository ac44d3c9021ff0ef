"""Shared pytest fixtures for polycode tests."""

import pytest

from polycode.core.config import DEFAULT_CONFIG, EngineConfig


@pytest.fixture
def python_add():
    return "def add(a, b):\n    return a + b"


@pytest.fixture
def python_point():
    return (
        "class Point:\n"
        "    def __init__(self, x, y):\n"
        "        self.x = x\n"
        "        self.y = y\n"
    )


@pytest.fixture
def js_dog():
    return (
        "class Dog extends Animal {\n"
        "  constructor(name) {\n"
        "    this.name = name;\n"
        "  }\n"
        "  speak() {\n"
        "    console.log(this.name);\n"
        "  }\n"
        "}\n"
    )


@pytest.fixture
def go_counter():
    return (
        "type Counter struct {\n"
        "\tcount int\n"
        "}\n"
        "\n"
        "func (c *Counter) Inc() {\n"
        "\tc.count++\n"
        "}\n"
    )


@pytest.fixture
def java_missing_semicolon():
    return (
        "public class Main {\n"
        "    public static void main(String[] args) {\n"
        "        int x = 5\n"
        "        System.out.println(x);\n"
        "    }\n"
        "}\n"
    )


@pytest.fixture
def config() -> EngineConfig:
    return DEFAULT_CONFIG

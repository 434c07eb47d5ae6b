"""Shared fixtures for codeanalyzer tests."""
from pathlib import Path
from unittest.mock import MagicMock

import pytest

_ENV_VARS = [
    "CODEANALYZER_PROVIDER",
    "CODEANALYZER_MODE",
    "CODEANALYZER_MAX_CONTENT_BYTES",
    "CODEANALYZER_DEBUG",
    "OLLAMA_MODEL",
    "OLLAMA_ENDPOINT",
    "ANTHROPIC_MODEL",
    "ANTHROPIC_API_KEY",
]


@pytest.fixture(autouse=True)
def codeanalyzer_home(tmp_path, monkeypatch):
    """Isolate every test from real config, data and environment.

    HOME and the working directory point into tmp_path so neither the global
    nor a project config file is picked up, and CODEANALYZER_HOME holds the
    criteria store.
    """
    home = tmp_path / "codeanalyzer-data"
    home.mkdir()
    user_home = tmp_path / "home"
    user_home.mkdir()
    workdir = tmp_path / "cwd"
    workdir.mkdir()

    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("CODEANALYZER_HOME", str(home))
    monkeypatch.setenv("HOME", str(user_home))
    monkeypatch.chdir(workdir)

    from codeanalyzer import ui
    from codeanalyzer.core.config_service import reset_config_service
    from codeanalyzer.providers import reset_provider

    reset_config_service()
    reset_provider()
    ui.set_plain_mode(False)
    ui.set_json_mode(False)
    yield home
    reset_config_service()
    reset_provider()
    ui.set_plain_mode(False)
    ui.set_json_mode(False)


@pytest.fixture
def make_project(tmp_path):
    """Return a factory that writes ``{relative_path: content}`` under a fresh root."""
    counter = {"n": 0}

    def _make(files: dict[str, str | bytes]) -> Path:
        counter["n"] += 1
        root = tmp_path / f"project{counter['n']}"
        root.mkdir()
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def webapp_files():
    """A small ASP.NET-style project: controllers, a context, pages, config."""
    return {
        "Program.cs": (
            "var builder = WebApplication.CreateBuilder(args);\n"
            "builder.Services.AddDbContext<AppDbContext>(o =>\n"
            "    o.UseSqlServer(builder.Configuration.GetConnectionString(\"DefaultConnection\")));\n"
            "var app = builder.Build();\n"
            "using (var scope = app.Services.CreateScope())\n"
            "{\n"
            "    scope.ServiceProvider.GetRequiredService<AppDbContext>().Database.Migrate();\n"
            "}\n"
            "app.Run();\n"
        ),
        "appsettings.json": (
            '{\n  "ConnectionStrings": {\n'
            '    "DefaultConnection": "Server=(localdb)\\\\mssqllocaldb;Database=Shop;Trusted_Connection=True"\n'
            "  }\n}\n"
        ),
        "Controllers/BaseController.cs": (
            "public abstract class BaseController : ControllerBase { }\n"
        ),
        "Controllers/HomeController.cs": (
            "[ApiController]\npublic class HomeController : BaseController { }\n"
        ),
        "Controllers/OrdersController.cs": (
            "public class OrdersController : Controller { }\n"
        ),
        "Data/AppDbContext.cs": (
            "public class AppDbContext : DbContext { }\n"
        ),
        "Migrations/20240101_Initial.cs": (
            "using Microsoft.EntityFrameworkCore.Migrations;\n"
            "public partial class Initial : Migration { }\n"
        ),
        "Models/Order.cs": "public class Order { public int Id { get; set; } }\n",
        "Services/OrderService.cs": "public class OrderService { }\n",
        "Pages/Index.razor": '@page "/"\n<h1>Hello</h1>\n',
        "Pages/Shared/_Layout.cshtml": "<html>@RenderBody()</html>\n",
        "bin/Debug/App.dll.config": "<configuration />\n",
    }


@pytest.fixture
def mock_provider():
    """Create a mock AI provider."""
    provider = MagicMock()
    provider.name = "mock"
    provider.model = "mock-model-1"
    provider.is_available.return_value = True
    provider.chat.return_value = "✅ Passed: 1 criteria\n❌ Failed: 1 criteria"
    return provider

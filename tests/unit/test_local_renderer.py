"""Unit tests for LocalRenderer: preflight, eager launch, ordered draining, kills, failures."""

import asyncio

import pytest

from tests.fakes import FakeSpawner
from umlpress.contexts.diagram import Diagram
from umlpress.contexts.rendering import (
    ConfigurationError,
    EngineProcess,
    LocalRenderer,
    Renderer,
    RenderError,
)
from umlpress.utils.config import ConfigProvider, RenderSettings


@pytest.mark.unit
def test_local_renderer_implements_renderer_interface(config):
    renderer = LocalRenderer(config, spawn=FakeSpawner())

    assert isinstance(renderer, Renderer)
    assert renderer.limit_concurrency() is True
    assert "png" in renderer.formats()
    assert "emf" in renderer.formats()


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("page_count", [1, 2, 5])
async def test_render_in_memory_returns_pages_in_order(config, make_diagram, page_count):
    """Every page produces one outcome, in page order."""
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(make_diagram(page_count), "png")
    outcomes = await task.result()

    assert [o.index for o in outcomes] == list(range(page_count))
    assert [o.data for o in outcomes] == [f"page-{i}".encode() for i in range(page_count)]
    assert all(not o.written for o in outcomes)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_out_of_order_completion_keeps_page_order(config, make_diagram):
    """Later pages finishing first does not change the artifact order."""
    spawner = FakeSpawner(
        pages={
            0: {"stdout": b"first", "delay": 0.03},
            1: {"stdout": b"second", "delay": 0.02},
            2: {"stdout": b"third"},
        }
    )
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(make_diagram(3), "svg")
    outcomes = await task.result()

    assert [o.data for o in outcomes] == [b"first", b"second", b"third"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_all_processes_start_before_any_input(config, make_diagram):
    """Launch phase starts every page before the chain writes anything."""
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(make_diagram(3), "png")

    assert len(task.processes) == 3
    assert all(isinstance(p, EngineProcess) for p in task.processes)
    assert [p.index for p in task.processes] == [0, 1, 2]
    assert spawner.events == [("spawn", 0), ("spawn", 1), ("spawn", 2)]

    await task.result()
    assert len(task.processes) == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_next_page_input_waits_for_previous_output(config, make_diagram):
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)
    diagram = make_diagram(3)

    task = await renderer.render(diagram, "png")
    await task.result()

    drained = [e for e in spawner.events if e[0] in ("write", "exit")]
    assert drained == [
        ("write", 0), ("exit", 0),
        ("write", 1), ("exit", 1),
        ("write", 2), ("exit", 2),
    ]
    for index in range(3):
        stdin = spawner.engine_process(index).stdin
        assert stdin.written == diagram.content.encode("utf-8")
        assert stdin.closed


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_content_closes_stdin_without_writing(config):
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(Diagram(content="", page_count=2, title="blank"), "png")
    outcomes = await task.result()

    assert [o.data for o in outcomes] == [b"page-0", b"page-1"]
    assert not [e for e in spawner.events if e[0] == "write"]
    for index in range(2):
        stdin = spawner.engine_process(index).stdin
        assert stdin.written == b""
        assert stdin.closed


@pytest.mark.unit
@pytest.mark.asyncio
async def test_render_to_files_writes_indexed_pages(config, make_diagram, out_dir):
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(make_diagram(2), "png", out_dir / "sequence.png")
    outcomes = await task.result()

    assert [o.path for o in outcomes] == [
        out_dir / "sequence-page1.png",
        out_dir / "sequence-page2.png",
    ]
    assert all(o.data is None for o in outcomes)
    assert (out_dir / "sequence-page1.png").read_bytes() == b"page-0"
    assert (out_dir / "sequence-page2.png").read_bytes() == b"page-1"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_single_page_file_keeps_destination_name(config, make_diagram, out_dir):
    renderer = LocalRenderer(config, spawn=FakeSpawner())

    task = await renderer.render(make_diagram(1), "svg", out_dir / "sequence.svg")
    outcomes = await task.result()

    assert outcomes[0].path == out_dir / "sequence.svg"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_map_data_uses_pipemap_without_format(config, make_diagram):
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.get_map_data(make_diagram(2))
    await task.result()

    for argv in spawner.engine_calls:
        assert "-pipemap" in argv
        assert "-pipe" not in argv
        assert not any(arg.startswith("-t") for arg in argv)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unsupported_format_raises(config, make_diagram):
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)

    with pytest.raises(ValueError, match="Unsupported format"):
        await renderer.render(make_diagram(1), "gif")
    assert spawner.calls == []


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_java_rejects_without_spawning(jar_file, make_diagram):
    config = ConfigProvider(settings=RenderSettings(java=None, jar=jar_file))
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(make_diagram(3), "png")

    assert task.done()
    assert task.processes == []
    assert spawner.calls == []
    with pytest.raises(ConfigurationError, match="Java"):
        await task.result()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_jar_rejects_with_install_location(tmp_path, make_diagram):
    install_location = tmp_path / "plantuml-home"
    config = ConfigProvider(
        settings=RenderSettings(java="/usr/bin/java", install_location=install_location)
    )
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(make_diagram(2), "png")

    assert task.processes == []
    assert spawner.calls == []
    with pytest.raises(ConfigurationError) as exc_info:
        await task.result()
    assert str(install_location) in exc_info.value.message
    assert exc_info.value.install_location == install_location


@pytest.mark.unit
@pytest.mark.asyncio
async def test_engine_start_failure_rejects_task(config, make_diagram):
    async def broken_spawn(*argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    renderer = LocalRenderer(config, spawn=broken_spawn)
    task = await renderer.render(make_diagram(2, name="broken"), "png")

    assert task.processes == []
    with pytest.raises(RenderError, match="broken"):
        await task.result()


# ---------------------------------------------------------------------------
# Kills
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("killed_page", [0, 1, 2])
async def test_kill_before_turn_voids_results(config, make_diagram, killed_page):
    """Killed page gets no input, the task resolves with no artifacts."""
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)
    diagram = make_diagram(3)

    task = await renderer.render(diagram, "png")
    assert task.processes[killed_page].kill() is True

    outcomes = await task.result()

    assert outcomes is None
    for index in range(3):
        stdin = spawner.engine_process(index).stdin
        if index < killed_page:
            assert stdin.written == diagram.content.encode("utf-8")
        else:
            assert stdin.written == b""
            assert not stdin.closed


@pytest.mark.unit
@pytest.mark.asyncio
async def test_kill_while_earlier_page_runs(config, make_diagram):
    spawner = FakeSpawner(pages={0: {"stdout": b"slow", "delay": 0.05}})
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(make_diagram(3), "png")
    await asyncio.sleep(0.01)
    task.processes[2].terminate()

    assert await task.result() is None
    assert ("exit", 1) in spawner.events
    assert ("write", 2) not in spawner.events


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.asyncio
async def test_page_failure_rejects_with_title_and_stops_chain(config, make_diagram):
    spawner = FakeSpawner(
        pages={
            1: {
                "stdout": b"partial image",
                "stderr": b"Syntax Error? (line 4)",
                "returncode": 1,
            }
        }
    )
    renderer = LocalRenderer(config, spawn=spawner)

    task = await renderer.render(make_diagram(3, name="checkout-flow"), "png")

    with pytest.raises(RenderError) as exc_info:
        await task.result()

    assert "checkout-flow" in exc_info.value.message
    assert "Syntax Error? (line 4)" in exc_info.value.message
    assert exc_info.value.out == b"partial image"
    # Later page was launched but never fed
    assert len(task.processes) == 3
    assert spawner.engine_process(2).stdin.written == b""
    assert ("write", 2) not in spawner.events


@pytest.mark.unit
@pytest.mark.asyncio
async def test_custom_localizer_formats_page_errors(config, make_diagram):
    spawner = FakeSpawner(pages={0: {"stderr": b"boom", "returncode": 2}})
    renderer = LocalRenderer(
        config,
        spawn=spawner,
        localize=lambda message_id, *args: f"#{message_id}|" + "|".join(map(str, args)),
    )

    task = await renderer.render(make_diagram(1, name="deploy"), "png")

    with pytest.raises(RenderError) as exc_info:
        await task.result()
    assert exc_info.value.message == "#10|deploy|boom"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unwritable_destination_rejects_with_title(config, make_diagram, tmp_path):
    spawner = FakeSpawner()
    renderer = LocalRenderer(config, spawn=spawner)
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    task = await renderer.render(make_diagram(2, name="flow"), "png", blocker / "flow.png")

    with pytest.raises(RenderError) as exc_info:
        await task.result()

    assert "Error rendering 'flow'" in exc_info.value.message
    assert "flow-page1.png" in exc_info.value.message
    assert exc_info.value.out == b"page-0"
    assert ("write", 1) not in spawner.events

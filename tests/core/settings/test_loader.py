# tests/core/settings/test_loader.py
"""
Testes do loader canônico de settings.

Este módulo valida o carregamento dos settings de deploy a partir de
arquivos YAML/JSON e a resolução final via deep-merge entre defaults e
overrides locais.

Os testes asseguram que:
- o arquivo de defaults é obrigatório
- o arquivo local é opcional
- overrides locais têm prioridade sobre defaults
- formatos não suportados e raízes inválidas falham explicitamente

Limites explícitos:
    - Não valida a conversão para DeploySettings (ver test_deploy_settings.py)
    - Não valida hashing
"""

from pathlib import Path

import pytest

try:
    from monaco_deploy.core.settings.loader import load_settings
    from monaco_deploy.core.settings.errors import (
        InvalidSettingsRootTypeError,
        SettingsNotFoundError,
        UnsupportedSettingsFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_settings = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que o loader de settings esteja disponível para os testes.

    Falha imediatamente, com mensagem apontando o módulo esperado, quando
    a importação não é possível.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing settings loader. Implement:\n"
            "- src/monaco_deploy/core/settings/loader.py (load_settings)\n"
            "- src/monaco_deploy/core/settings/errors.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_missing_defaults_raises(tmp_path: Path):
    """
    Verifica que a ausência do arquivo de defaults gera erro explícito.

    Invariantes:
        - Nenhum dicionário parcial é retornado
    """
    _require_imports()
    with pytest.raises(SettingsNotFoundError):
        load_settings(defaults_path=str(tmp_path / "defaults.yaml"))


def test_missing_local_is_ok(tmp_path: Path, project_like_settings_defaults_yaml):
    """Verifica que um arquivo local inexistente é ignorado."""
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(project_like_settings_defaults_yaml, encoding="utf-8")

    settings = load_settings(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))

    assert settings["deploy"]["continue_on_error"] is False
    assert settings["retry"]["short"]["max_retries"] == 3


def test_load_defaults_and_local(
    tmp_path: Path, project_like_settings_defaults_yaml, project_like_settings_local_yaml
):
    """
    Verifica que overrides locais têm prioridade e que chaves não
    sobrescritas permanecem com o valor dos defaults.

    Decisões arquiteturais:
        - Merge recursivo por chave
        - `int` sobre `float` (e vice-versa) é aceito
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(project_like_settings_defaults_yaml, encoding="utf-8")
    local.write_text(project_like_settings_local_yaml, encoding="utf-8")

    settings = load_settings(defaults_path=str(defaults), local_path=str(local))

    assert settings["deploy"]["continue_on_error"] is True
    assert settings["deploy"]["max_workers"] == 4
    assert settings["retry"]["short"] == {"max_retries": 3, "wait_seconds": 0.5}
    assert settings["retry"]["very_long"]["max_retries"] == 5


def test_json_defaults_are_supported(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.json"
    defaults.write_text('{"deploy": {"dry_run": true}}', encoding="utf-8")

    assert load_settings(defaults_path=str(defaults)) == {"deploy": {"dry_run": True}}


def test_empty_file_is_empty_dict(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("", encoding="utf-8")

    assert load_settings(defaults_path=str(defaults)) == {}


def test_invalid_root_type_raises(tmp_path: Path):
    """Verifica que uma raiz que não é dict é rejeitada."""
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- just\n- a\n- list\n", encoding="utf-8")
    with pytest.raises(InvalidSettingsRootTypeError):
        load_settings(defaults_path=str(defaults))


def test_unsupported_extension_raises(tmp_path: Path):
    """Verifica que extensões fora de YAML/JSON falham explicitamente."""
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("deploy = { dry_run = true }\n", encoding="utf-8")
    with pytest.raises(UnsupportedSettingsFormatError):
        load_settings(defaults_path=str(defaults))


def test_extra_paths_are_applied_in_order(tmp_path: Path, project_like_settings_defaults_yaml):
    """
    Verifica a camada de overrides explícitos.

    Invariantes:
        - cada arquivo extra sobrescreve as camadas anteriores
        - arquivo extra inexistente é erro, diferente do arquivo local
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(project_like_settings_defaults_yaml, encoding="utf-8")
    first = tmp_path / "ci.yaml"
    first.write_text("deploy:\n  max_workers: 2\n  dry_run: true\n", encoding="utf-8")
    second = tmp_path / "ci.json"
    second.write_text('{"deploy": {"max_workers": 1}}', encoding="utf-8")

    settings = load_settings(defaults_path=str(defaults), extra_paths=[str(first), str(second)])

    assert settings["deploy"]["max_workers"] == 1
    assert settings["deploy"]["dry_run"] is True

    with pytest.raises(SettingsNotFoundError):
        load_settings(defaults_path=str(defaults), extra_paths=[str(tmp_path / "missing.yaml")])

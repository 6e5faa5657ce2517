#!/usr/bin/env python3
"""
Cadastrar um usuario diretamente no snapshot JSON (com o servico parado).

Uso:
  python scripts/add_user.py --name "Alice" --email alice@example.com [--data-path ./data/users.json]
"""
from __future__ import annotations

import argparse
import sys

from user_api.core.config import get_settings
from user_api.domain.users import is_valid_email, normalize_name
from user_api.repositories.json_storage import AlreadyExistsError, JSONUserStore
from user_api.services.user_service import UserService


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Cadastrar usuario no arquivo JSON")
    ap.add_argument("--name", required=True, help="Nome de exibicao")
    ap.add_argument("--email", required=True, help="Email (unico)")
    ap.add_argument("--data-path", help="Caminho do snapshot (default: DATA_PATH)")
    args = ap.parse_args(argv)

    name = normalize_name(args.name)
    if not name:
        raise SystemExit("Nome invalido")
    email = args.email or ""
    if not is_valid_email(email):
        raise SystemExit("Email invalido")

    data_path = args.data_path or get_settings().data_path
    svc = UserService(JSONUserStore(data_path))
    try:
        user = svc.create_user(name, email)
    except AlreadyExistsError:
        raise SystemExit(f"Email '{email}' ja esta em uso")
    print("OK: usuario cadastrado")
    print(f"  ID: {user.id}")
    print(f"  Email: {user.email}")
    print(f"  Arquivo: {data_path}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - uso CLI
        sys.stderr.write(f"Erro: {exc}\n")
        raise SystemExit(1)

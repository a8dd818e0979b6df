"""
Import CSV initial des utilisateurs, exécuté une seule fois au démarrage.

- Fichier absent : on journalise et on continue le démarrage.
- Table users non vide : import ignoré (amorçage, pas de fusion).
- Fichier mal formé : CsvImportError est propagée, rien n'est inséré.

Colonnes (insensibles à la casse) : matricule, password, first name, last name.
Colonne optionnelle `role` : l'utilisateur reçoit ce rôle (qui doit exister).
"""

import csv
import io
import logging
import os
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.user import Role, User, UserRole
from app.schemas.user import UserImportRow
from app.services.password_service import hash_password

logger = logging.getLogger(__name__)

# Nom canonique → en-têtes acceptés (l'export d'origine utilise "Matrecul")
COLUMN_ALIASES = {
    "matricule": {"matricule", "matrecul"},
    "password": {"password", "mot de passe"},
    "first_name": {"first name", "first_name", "prenom", "prénom"},
    "last_name": {"last name", "last_name", "nom"},
    "role": {"role", "rôle"},
}
REQUIRED_COLUMNS = {"matricule", "password", "first_name", "last_name"}
# Tailles des colonnes de la table users
MAX_LENGTHS = {"matricule": 10, "first_name": 50, "last_name": 50}


class CsvImportError(ValueError):
    """Fichier CSV présent mais inexploitable."""


def _normalize_header(raw: str) -> str:
    """Normalise un nom de colonne : minuscules, sans espaces autour."""
    return raw.strip().lower()


def _detect_separator(sample: str) -> str:
    """Détecte le séparateur CSV (virgule ou point-virgule)."""
    if sample.count(";") > sample.count(","):
        return ";"
    return ","


def _map_columns(fieldnames: list[str]) -> dict[str, str]:
    """Associe chaque colonne canonique à l'en-tête réel du fichier."""
    mapping: dict[str, str] = {}
    for raw in fieldnames:
        normalized = _normalize_header(raw)
        for canonical, aliases in COLUMN_ALIASES.items():
            if normalized in aliases and canonical not in mapping:
                mapping[canonical] = raw
    return mapping


def parse_users_csv(text: str) -> list[UserImportRow]:
    """
    Parse et valide le contenu CSV. Lève CsvImportError à la première anomalie :
    colonne obligatoire absente, champ obligatoire vide ou trop long,
    matricule en double.
    """
    lines = text.splitlines()
    separator = _detect_separator(lines[0] if lines else "")
    reader = csv.DictReader(io.StringIO(text), delimiter=separator)

    if reader.fieldnames is None:
        raise CsvImportError("Fichier CSV vide ou illisible")

    columns = _map_columns(reader.fieldnames)
    missing = REQUIRED_COLUMNS - columns.keys()
    if missing:
        raise CsvImportError(f"Colonnes manquantes : {', '.join(sorted(missing))}")

    rows: list[UserImportRow] = []
    seen: set[str] = set()

    for row_num, row in enumerate(reader, start=2):  # ligne 1 = header
        values = {
            canonical: (row.get(header) or "").strip()
            for canonical, header in columns.items()
        }

        # Ligne vide
        if not any(values.values()):
            continue

        empty = [c for c in sorted(REQUIRED_COLUMNS) if not values[c]]
        if empty:
            raise CsvImportError(f"Ligne {row_num} : champ(s) vide(s) : {', '.join(empty)}")

        for column, max_length in MAX_LENGTHS.items():
            if len(values[column]) > max_length:
                raise CsvImportError(
                    f"Ligne {row_num} : {column} dépasse {max_length} caractères"
                )

        key = values["matricule"].lower()
        if key in seen:
            raise CsvImportError(f"Ligne {row_num} : matricule {values['matricule']} en double")
        seen.add(key)

        rows.append(UserImportRow(
            matricule=values["matricule"],
            password=values["password"],
            first_name=values["first_name"],
            last_name=values["last_name"],
            role=values.get("role") or None,
        ))

    return rows


def _resolve_roles(db: Session, rows: list[UserImportRow]) -> dict[str, int]:
    """Retourne nom de rôle (minuscules) → ID. Lève CsvImportError si un rôle est inconnu."""
    wanted = {r.role.lower() for r in rows if r.role}
    if not wanted:
        return {}

    found = db.execute(
        select(func.lower(Role.name), Role.id).where(func.lower(Role.name).in_(wanted))
    ).fetchall()
    role_ids = {row[0]: row[1] for row in found}

    unknown = wanted - role_ids.keys()
    if unknown:
        raise CsvImportError(f"Rôle(s) inconnu(s) : {', '.join(sorted(unknown))}")
    return role_ids


def import_users_from_csv(db: Session, file_path: str) -> int:
    """
    Importe les utilisateurs du fichier si la table users est vide.
    Retourne le nombre d'utilisateurs insérés.
    """
    if not os.path.isfile(file_path):
        logger.error("Fichier CSV introuvable : %s", file_path)
        return 0

    user_count = db.execute(select(func.count()).select_from(User)).scalar() or 0
    if user_count > 0:
        logger.info("Des utilisateurs existent déjà en base. Import CSV ignoré.")
        return 0

    try:
        with open(file_path, encoding="utf-8-sig", newline="") as f:  # utf-8-sig gère le BOM Excel
            text = f.read()

        rows = parse_users_csv(text)
        logger.info("%d ligne(s) trouvée(s) dans %s", len(rows), file_path)
        if not rows:
            return 0

        role_ids = _resolve_roles(db, rows)

        users = [
            User(
                matricule=r.matricule,
                first_name=r.first_name,
                last_name=r.last_name,
                password_hash=hash_password(r.password),
            )
            for r in rows
        ]
        db.add_all(users)
        db.flush()  # obtenir les IDs avant d'assigner les rôles

        _assign_roles(db, rows, users, role_ids)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.error("Erreur lors de l'import CSV des utilisateurs : %s", exc)
        raise

    logger.info("%d utilisateur(s) importé(s) depuis le CSV", len(users))
    return len(users)


def _assign_roles(
    db: Session,
    rows: list[UserImportRow],
    users: list[User],
    role_ids: dict[str, int],
) -> None:
    """Crée les liens user_roles pour les lignes qui portent un rôle."""
    links = []
    for row, user in zip(rows, users):
        role_id: Optional[int] = role_ids.get(row.role.lower()) if row.role else None
        if role_id is not None:
            links.append({"user_id": user.id, "role_id": role_id})

    if links:
        db.bulk_insert_mappings(UserRole, links)

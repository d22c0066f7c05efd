import json


def read_payload(request) -> dict:
    """
    Corps de requête de l'app mobile (JSON) ou d'un formulaire classique.
    Un JSON invalide donne un dict vide : la validation en aval répond 400.
    """
    if request.content_type == "application/json":
        try:
            data = json.loads(request.body or b"{}")
        except (ValueError, UnicodeDecodeError):
            return {}
        return data if isinstance(data, dict) else {}
    return request.POST.dict()


def parse_number(value):
    """float pour les chaînes numériques, la valeur telle quelle sinon."""
    if isinstance(value, str):
        try:
            return float(value.strip().replace(",", "."))
        except ValueError:
            return value
    return value

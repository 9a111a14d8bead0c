from collections import namedtuple

from catalog.models import Service

CART_SESSION_KEY = 'cart'

CartLine = namedtuple('CartLine', ['service', 'quantity'])


class Cart:
    """
    A list of ``{service_id, quantity}`` entries kept in the session.
    Services are only loaded when the cart is resolved.
    """

    def __init__(self, request):
        self.session = request.session
        self.entries = []
        for entry in self.session.get(CART_SESSION_KEY) or []:
            try:
                service_id = int(entry['service_id'])
                quantity = int(entry['quantity'])
            except (KeyError, TypeError, ValueError):
                continue
            if quantity > 0:
                self.entries.append({'service_id': service_id, 'quantity': quantity})

    def __len__(self):
        return sum(entry['quantity'] for entry in self.entries)

    def is_empty(self):
        return not self.entries

    def _find(self, service_id):
        for entry in self.entries:
            if entry['service_id'] == service_id:
                return entry
        return None

    def add(self, service_id, quantity=1):
        entry = self._find(service_id)
        if entry:
            entry['quantity'] += quantity
        else:
            self.entries.append({'service_id': service_id, 'quantity': quantity})
        self.save()

    def set_quantity(self, service_id, quantity):
        if quantity <= 0:
            return self.remove(service_id)
        entry = self._find(service_id)
        if entry is None:
            return False
        entry['quantity'] = quantity
        self.save()
        return True

    def remove(self, service_id):
        before = len(self.entries)
        self.entries = [entry for entry in self.entries if entry['service_id'] != service_id]
        self.save()
        return len(self.entries) != before

    def clear(self):
        self.entries = []
        self.session.pop(CART_SESSION_KEY, None)

    def save(self):
        self.session[CART_SESSION_KEY] = [dict(entry) for entry in self.entries]
        self.session.modified = True

    def resolve(self, prune=True):
        """
        Loads the services behind the entries. Returns ``(lines, missing_ids)``
        where missing ids are services that were deleted or deactivated.
        With ``prune`` the stale entries are dropped from the session.
        """
        ids = [entry['service_id'] for entry in self.entries]
        services = (Service.objects
                    .filter(pk__in=ids, is_active=True)
                    .select_related('sub_category'))
        by_id = {service.pk: service for service in services}

        lines = []
        missing = []
        for entry in self.entries:
            service = by_id.get(entry['service_id'])
            if service is None:
                missing.append(entry['service_id'])
            else:
                lines.append(CartLine(service, entry['quantity']))

        if missing and prune:
            self.entries = [entry for entry in self.entries if entry['service_id'] not in missing]
            self.save()
        return lines, missing

    @staticmethod
    def category_ids(lines):
        return sorted({line.service.sub_category.parent_category_id for line in lines})

from brainvault.core.interfaces import Notifier


class ConsoleNotifier(Notifier):
    def deliver(self, destination_id: str, text: str) -> None:
        if destination_id:
            print(f"[{destination_id}]")
        print(text)

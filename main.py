"""Print the wardrobe dashboard for the configured device."""

from wardrobe_app.app import WardrobeApp


def main() -> None:
    app = WardrobeApp()
    print(app.dashboard_summary())


if __name__ == "__main__":
    main()

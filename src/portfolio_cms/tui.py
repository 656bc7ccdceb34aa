from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Checkbox,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Markdown,
    SelectionList,
    Static,
    TextArea,
)
from textual.widgets.selection_list import Selection

from portfolio_cms.client import PortfolioApi
from portfolio_cms.errors import ApiError, ValidationError
from portfolio_cms.models import ImageFile
from portfolio_cms.services import SessionStore
from portfolio_cms.tui_rendering import (
    gallery_labels,
    render_markdown,
    render_row,
    render_user_details_markdown,
)
from portfolio_cms.workflows import (
    DESCRIPTORS,
    FieldKind,
    Mode,
    Phase,
    Severity,
    UserDetailsController,
    WorkflowController,
    controller_for,
)

logger = logging.getLogger(__name__)

FIELD_PREFIX = "field-"
ERROR_PREFIX = "error-"


class AppNotifier:
    """Routes workflow notifications to Textual toasts."""

    def __init__(self, app: App[Any]) -> None:
        self._app = app

    def notify(self, message: str, severity: Severity = Severity.INFORMATION) -> None:
        self._app.notify(message, severity=Severity(severity).value)


def _load_image(raw_path: str) -> ImageFile | None:
    path = Path(raw_path.strip()).expanduser()
    if not path.is_file():
        return None
    return ImageFile.from_path(path)


def _field_name(widget_id: str | None) -> str | None:
    if widget_id and widget_id.startswith(FIELD_PREFIX):
        return widget_id[len(FIELD_PREFIX) :]
    return None


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no confirmation dialog."""

    def __init__(self, message: str) -> None:
        super().__init__()
        self._message = message

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self._message, id="confirm-message"),
            Horizontal(
                Button("Delete", id="confirm-yes", variant="error"),
                Button("Cancel", id="confirm-no", variant="default"),
            ),
            id="dialog",
        )

    @on(Button.Pressed, "#confirm-yes")
    def handle_yes(self) -> None:
        self.dismiss(True)

    @on(Button.Pressed, "#confirm-no")
    def handle_no(self) -> None:
        self.dismiss(False)


class EntityFormScreen(ModalScreen[bool]):
    """Create/edit form generated from the controller's descriptor.

    Every widget change is pushed to the controller immediately, so the
    controller's form dict is always the source of truth.
    """

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, controller: WorkflowController[Any]) -> None:
        super().__init__()
        self.controller = controller

    def compose(self) -> ComposeResult:
        controller = self.controller
        descriptor = controller.descriptor
        verb = "Edit" if controller.mode is Mode.EDIT else "Add"
        widgets: list[Any] = [Static(f"{verb} {descriptor.singular}", id="form-title")]

        for field in descriptor.fields:
            label = f"{field.label} *" if field.required else field.label
            value = controller.form.get(field.name)
            widget_id = f"{FIELD_PREFIX}{field.name}"
            if field.kind is FieldKind.CHECKBOX:
                widgets.append(Checkbox(field.label, bool(value), id=widget_id))
            elif field.kind in (FieldKind.TEXTAREA, FieldKind.RICH_TEXT):
                widgets.append(Label(label))
                widgets.append(TextArea(str(value or ""), id=widget_id))
            elif field.kind is FieldKind.SKILLS:
                selected = set(value or [])
                widgets.append(Label(label))
                widgets.append(
                    SelectionList[str](
                        *(
                            Selection(skill.name, skill.id, skill.id in selected)
                            for skill in controller.skills
                        ),
                        id=widget_id,
                    )
                )
            elif field.kind is FieldKind.IMAGE:
                slot = controller.images.get(field.name)
                current = slot.ref if slot is not None and slot.ref else "none"
                widgets.append(Label(f"{label} (current: {current})", id=f"label-{field.name}"))
                widgets.append(
                    Input(placeholder="Path to image, Enter to select", id=widget_id)
                )
                widgets.append(Button("Remove image", id=f"clear-{field.name}"))
            elif field.kind is FieldKind.GALLERY:
                widgets.append(Label(label))
                widgets.append(ListView(id=f"gallery-{field.name}"))
                widgets.append(
                    Input(placeholder="Path to image, Enter to add", id=widget_id)
                )
                widgets.append(Button("Remove selected", id=f"remove-{field.name}"))
            else:
                widgets.append(Label(label))
                widgets.append(
                    Input(
                        "" if value is None else str(value),
                        placeholder=field.placeholder,
                        id=widget_id,
                    )
                )
            widgets.append(Static("", id=f"{ERROR_PREFIX}{field.name}", classes="field-error"))

        widgets.append(
            Horizontal(
                Button("Save", id="form-save", variant="primary"),
                Button("Cancel", id="form-cancel", variant="default"),
            )
        )
        yield VerticalScroll(*widgets, id="form-card")

    def on_mount(self) -> None:
        for name in self.controller.galleries:
            self._refresh_gallery(name)

    def _refresh_gallery(self, name: str) -> None:
        gallery_list = self.query_one(f"#gallery-{name}", ListView)
        gallery_list.clear()
        for text in gallery_labels(self.controller.galleries[name]):
            gallery_list.append(ListItem(Label(text)))

    def _show_errors(self) -> None:
        for field in self.controller.descriptor.fields:
            error = self.controller.field_errors.get(field.name, "")
            self.query_one(f"#{ERROR_PREFIX}{field.name}", Static).update(error)

    def _sync_slug(self) -> None:
        if "slug" not in self.controller.form:
            return
        slug_input = self.query_one(f"#{FIELD_PREFIX}slug", Input)
        slug = str(self.controller.form.get("slug") or "")
        if slug_input.value != slug:
            slug_input.value = slug

    def _set(self, name: str, value: Any) -> None:
        # Widgets keep posting change events while a submit is in flight.
        if self.controller.phase is Phase.MODAL_OPEN:
            self.controller.set_field(name, value)

    # ---- Field events ---------------------------------------------------

    @on(Input.Changed)
    def handle_input_changed(self, event: Input.Changed) -> None:
        name = _field_name(event.input.id)
        if name is None or name in self.controller.images or name in self.controller.galleries:
            return
        self._set(name, event.value)
        if name == "title":
            self._sync_slug()

    @on(Input.Submitted)
    def handle_image_path(self, event: Input.Submitted) -> None:
        name = _field_name(event.input.id)
        if name is None:
            return
        if name not in self.controller.images and name not in self.controller.galleries:
            return
        image = _load_image(event.value)
        if image is None:
            self.app.notify(f"No image file at {event.value}", severity="error")
            return
        event.input.value = ""
        if name in self.controller.galleries:
            self.controller.add_gallery_images(name, [image])
            self._refresh_gallery(name)
        else:
            self.controller.select_image(name, image)
            self.query_one(f"#label-{name}", Label).update(f"Selected: {image.filename}")

    @on(Checkbox.Changed)
    def handle_checkbox(self, event: Checkbox.Changed) -> None:
        name = _field_name(event.checkbox.id)
        if name is not None:
            self._set(name, event.value)

    @on(TextArea.Changed)
    def handle_text_area(self, event: TextArea.Changed) -> None:
        name = _field_name(event.text_area.id)
        if name is not None:
            self._set(name, event.text_area.text)

    @on(SelectionList.SelectedChanged)
    def handle_skills(self, event: SelectionList.SelectedChanged) -> None:
        name = _field_name(event.selection_list.id)
        if name is not None:
            self._set(name, list(event.selection_list.selected))

    @on(Button.Pressed)
    def handle_image_buttons(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id.startswith("clear-"):
            name = button_id[len("clear-") :]
            self.controller.clear_image(name)
            self.query_one(f"#label-{name}", Label).update("Image removed")
        elif button_id.startswith("remove-"):
            name = button_id[len("remove-") :]
            index = self.query_one(f"#gallery-{name}", ListView).index
            if index is None:
                return
            self.controller.remove_gallery_image(name, index)
            self._refresh_gallery(name)

    # ---- Save / cancel --------------------------------------------------

    @on(Button.Pressed, "#form-save")
    def handle_save(self) -> None:
        if self.controller.phase is not Phase.MODAL_OPEN:
            return
        self.query_one("#form-save", Button).disabled = True
        self.run_worker(self._submit(), exclusive=True, exit_on_error=False)

    async def _submit(self) -> None:
        ok = await self.controller.submit()
        if ok:
            self.dismiss(True)
            return
        self.query_one("#form-save", Button).disabled = False
        self._show_errors()

    @on(Button.Pressed, "#form-cancel")
    def handle_cancel(self) -> None:
        self.action_cancel()

    def action_cancel(self) -> None:
        if self.controller.phase is Phase.SUBMITTING:
            return
        self.controller.cancel()
        self.dismiss(False)


class UserDetailsScreen(ModalScreen[bool]):
    """Form for the singleton user details."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, controller: UserDetailsController) -> None:
        super().__init__()
        self.controller = controller

    def compose(self) -> ComposeResult:
        form = self.controller.form
        photo = self.controller.photo.ref or "none"
        yield VerticalScroll(
            Static("User Details", id="form-title"),
            Label("Name *"),
            Input(form.get("name", ""), id=f"{FIELD_PREFIX}name"),
            Static("", id=f"{ERROR_PREFIX}name", classes="field-error"),
            Label("Role *"),
            Input(
                form.get("role", ""),
                placeholder="e.g., Full Stack Developer",
                id=f"{FIELD_PREFIX}role",
            ),
            Static("", id=f"{ERROR_PREFIX}role", classes="field-error"),
            Label("Description"),
            TextArea(form.get("description", ""), id=f"{FIELD_PREFIX}description"),
            Label(f"Profile photo (current: {photo})", id="label-photo"),
            Input(placeholder="Path to image, Enter to select", id="photo-path"),
            Button("Remove photo", id="photo-clear"),
            Label("Social Media"),
            ListView(id="social-list"),
            Horizontal(
                Input(placeholder="Icon (e.g. github)", id="social-icon"),
                Input(placeholder="https://...", id="social-url"),
                Button("Add", id="social-add"),
            ),
            Button("Remove selected link", id="social-remove"),
            Static("", id=f"{ERROR_PREFIX}social_medias", classes="field-error"),
            Horizontal(
                Button("Save", id="form-save", variant="primary"),
                Button("Cancel", id="form-cancel", variant="default"),
            ),
            id="form-card",
        )

    def on_mount(self) -> None:
        self._refresh_socials()

    def _refresh_socials(self) -> None:
        social_list = self.query_one("#social-list", ListView)
        social_list.clear()
        for entry in self.controller.social_medias:
            social_list.append(ListItem(Label(entry)))

    @on(Input.Changed)
    def handle_input_changed(self, event: Input.Changed) -> None:
        name = _field_name(event.input.id)
        if name is not None:
            self.controller.set_field(name, event.value)

    @on(TextArea.Changed)
    def handle_description(self, event: TextArea.Changed) -> None:
        self.controller.set_field("description", event.text_area.text)

    @on(Input.Submitted, "#photo-path")
    def handle_photo(self, event: Input.Submitted) -> None:
        image = _load_image(event.value)
        if image is None:
            self.app.notify(f"No image file at {event.value}", severity="error")
            return
        self.controller.select_photo(image)
        self.query_one("#label-photo", Label).update(f"Selected: {image.filename}")

    @on(Button.Pressed, "#photo-clear")
    def handle_photo_clear(self) -> None:
        self.controller.clear_photo()
        self.query_one("#label-photo", Label).update("Photo removed")

    @on(Button.Pressed, "#social-add")
    def handle_social_add(self) -> None:
        icon_input = self.query_one("#social-icon", Input)
        url_input = self.query_one("#social-url", Input)
        if self.controller.add_social_media(icon_input.value, url_input.value):
            icon_input.value = ""
            url_input.value = ""
            self._refresh_socials()

    @on(Button.Pressed, "#social-remove")
    def handle_social_remove(self) -> None:
        index = self.query_one("#social-list", ListView).index
        if index is None:
            return
        self.controller.remove_social_media(index)
        self._refresh_socials()

    @on(Button.Pressed, "#form-save")
    def handle_save(self) -> None:
        self.query_one("#form-save", Button).disabled = True
        self.run_worker(self._submit(), exclusive=True, exit_on_error=False)

    async def _submit(self) -> None:
        ok = await self.controller.submit()
        if ok:
            self.dismiss(True)
            return
        self.query_one("#form-save", Button).disabled = False
        for name in ("name", "role", "social_medias"):
            error = self.controller.field_errors.get(name, "")
            self.query_one(f"#{ERROR_PREFIX}{name}", Static).update(error)

    @on(Button.Pressed, "#form-cancel")
    def handle_cancel(self) -> None:
        self.action_cancel()

    def action_cancel(self) -> None:
        self.dismiss(False)


class PortfolioCMSApp(App[None]):
    """Terminal content manager for the portfolio."""

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("n", "new_item", "New"),
        ("e", "edit_item", "Edit"),
        ("d", "delete_item", "Delete"),
    ]

    CSS = """
Screen {
    layout: vertical;
    background: $background;
}

#auth-screen {
    height: 1fr;
    align-horizontal: center;
    align-vertical: middle;
}

#auth-card {
    padding: 2;
    border: heavy $primary;
    background: $panel;
    width: 50;
    height: auto;
}

#auth-card Button,
#auth-card Input {
    width: 100%;
    margin-top: 1;
}

#app-screen {
    height: 1fr;
}

#middle {
    height: 1fr;
    layout: horizontal;
}

#sidebar {
    width: 26;
    padding: 1 2;
    border: heavy $primary;
    background: $panel;
}

#sidebar Button {
    margin-top: 1;
    width: 100%;
}

#main {
    border: heavy $primary;
    background: $surface;
    padding: 1;
}

#toolbar {
    height: auto;
}

#list-column {
    width: 45%;
}

#statusbar {
    height: auto;
    padding: 0 1;
    border: heavy $primary;
    background: $panel;
}

EntityFormScreen, UserDetailsScreen, ConfirmScreen {
    align: center middle;
}

#form-card {
    width: 80%;
    height: 90%;
    padding: 1 2;
    border: heavy $primary;
    background: $panel;
}

#form-card TextArea {
    height: 8;
}

#dialog {
    width: 50;
    height: auto;
    padding: 2;
    border: heavy $error;
    background: $panel;
}

.field-error {
    color: $error;
}
"""

    def __init__(
        self,
        api: PortfolioApi | None = None,
        store: SessionStore | None = None,
    ) -> None:
        super().__init__()
        self.api = api or PortfolioApi()
        self.store = store or SessionStore()
        self.store.bind(self.api)
        self.store.set_logout_handler(self._show_auth)
        self._notifier = AppNotifier(self)
        self._controllers: dict[str, WorkflowController[Any]] = {}
        self._section: str | None = None
        self._visible: list[Any] = []
        self._signup = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Container(
                Container(
                    Static("Portfolio CMS", id="auth-title"),
                    Input(placeholder="Username or email", id="auth-identifier"),
                    Input(placeholder="Email", id="auth-email"),
                    Input(placeholder="Full name", id="auth-name"),
                    Input(placeholder="Password", password=True, id="auth-password"),
                    Button("Login", id="auth-btn-submit", variant="primary"),
                    Button("Need an account? Sign up", id="auth-btn-mode", variant="default"),
                    id="auth-card",
                ),
                id="auth-screen",
            ),
            Container(
                Container(
                    Container(
                        Static("Portfolio\nCMS", id="title"),
                        Label("Hi, -", id="user-label"),
                        Button("User Details", id="nav-user", classes="nav"),
                        *(
                            Button(descriptor.plural, id=f"nav-{key}", classes="nav")
                            for key, descriptor in DESCRIPTORS.items()
                        ),
                        Button("Log Out", id="btn-logout", variant="default"),
                        Button("Exit", id="btn-exit", variant="error"),
                        id="sidebar",
                    ),
                    Container(
                        Horizontal(
                            Input(placeholder="Search...", id="search"),
                            Button("New", id="btn-new", variant="primary"),
                            Button("Edit", id="btn-edit", variant="default"),
                            Button("Delete", id="btn-delete", variant="error"),
                            id="toolbar",
                        ),
                        Horizontal(
                            Container(ListView(id="item-list"), id="list-column"),
                            VerticalScroll(Markdown("", id="output"), id="output-container"),
                        ),
                        id="main",
                    ),
                    id="middle",
                ),
                Container(Label("Ready.", id="status"), id="statusbar"),
                id="app-screen",
            ),
        )
        yield Footer()

    def on_mount(self) -> None:
        self._set_signup(False)
        state = self.store.restore()
        if state.authenticated:
            self._show_app()
        else:
            self._show_auth()

    async def on_unmount(self) -> None:
        await self.api.aclose()

    # ---------------------------------------------------------------------
    # AUTH
    # ---------------------------------------------------------------------

    def _set_signup(self, signup: bool) -> None:
        self._signup = signup
        self.query_one("#auth-email", Input).display = signup
        self.query_one("#auth-name", Input).display = signup
        self.query_one("#auth-btn-submit", Button).label = "Sign Up" if signup else "Login"
        self.query_one("#auth-btn-mode", Button).label = (
            "Have an account? Log in" if signup else "Need an account? Sign up"
        )

    def _show_auth(self) -> None:
        while len(self.screen_stack) > 1:
            self.pop_screen()
        self._controllers.clear()
        self._section = None
        self._visible = []
        self.query_one("#auth-password", Input).value = ""
        self.query_one("#auth-screen", Container).display = True
        self.query_one("#app-screen", Container).display = False
        self.query_one("#auth-identifier", Input).focus()

    def _show_app(self) -> None:
        identity = self.store.identity
        name = (identity.name or identity.username) if identity else "-"
        self.query_one("#user-label", Label).update(f"Hi, {name}")
        self.query_one("#auth-screen", Container).display = False
        self.query_one("#app-screen", Container).display = True
        self._open_section("skills")

    @on(Button.Pressed, "#auth-btn-mode")
    def handle_auth_mode(self) -> None:
        self._set_signup(not self._signup)

    @on(Button.Pressed, "#auth-btn-submit")
    def handle_auth_submit(self) -> None:
        self.run_worker(self._authenticate(), group="auth", exclusive=True, exit_on_error=False)

    async def _authenticate(self) -> None:
        identifier = self.query_one("#auth-identifier", Input).value
        password = self.query_one("#auth-password", Input).value
        try:
            if self._signup:
                await self.store.register(
                    email=self.query_one("#auth-email", Input).value,
                    username=identifier,
                    password=password,
                    name=self.query_one("#auth-name", Input).value,
                )
            else:
                await self.store.login(identifier, password)
        except ValidationError as exc:
            self.notify(exc.first_message(), severity="error")
            return
        except ApiError as exc:
            self.notify(exc.message, severity="error")
            return
        self._show_app()

    @on(Button.Pressed, "#btn-logout")
    def handle_logout(self) -> None:
        self.store.logout()

    @on(Button.Pressed, "#btn-exit")
    def exit_app(self) -> None:
        self.exit()

    # ---------------------------------------------------------------------
    # SECTIONS
    # ---------------------------------------------------------------------

    @property
    def controller(self) -> WorkflowController[Any] | None:
        if self._section is None:
            return None
        return self._controllers.get(self._section)

    @on(Button.Pressed, ".nav")
    def handle_nav(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id == "nav-user":
            self.run_worker(
                self._open_user_details(), group="section", exclusive=True, exit_on_error=False
            )
        elif button_id.startswith("nav-"):
            self._open_section(button_id[len("nav-") :])

    def _open_section(self, key: str) -> None:
        if key not in self._controllers:
            self._controllers[key] = controller_for(key, self.api, notifier=self._notifier)
        self._section = key
        self.query_one("#search", Input).value = ""
        self.query_one("#status", Label).update(f"Loading {DESCRIPTORS[key].plural}...")
        self.run_worker(self._load_section(key), group="section", exclusive=True)

    async def _load_section(self, key: str) -> None:
        controller = self._controllers[key]
        await controller.load()
        if self._section == key:
            self._refresh_list()

    def _refresh_list(self) -> None:
        controller = self.controller
        item_list = self.query_one("#item-list", ListView)
        output = self.query_one("#output", Markdown)
        status = self.query_one("#status", Label)
        item_list.clear()
        output.update("")
        if controller is None:
            return
        self._visible = controller.visible_items
        for entity in self._visible:
            item_list.append(ListItem(Label(render_row(controller.descriptor.key, entity))))
        descriptor = controller.descriptor
        status.update(f"{descriptor.plural}: {len(self._visible)} of {len(controller.items)}")
        if self._visible:
            item_list.index = 0
            output.update(render_markdown(descriptor.key, self._visible[0]))
        elif controller.search_query:
            output.update(f"No {descriptor.plural.lower()} match your search")

    def _selected(self) -> Any | None:
        index = self.query_one("#item-list", ListView).index
        if index is None or index < 0 or index >= len(self._visible):
            return None
        return self._visible[index]

    @on(Input.Changed, "#search")
    def handle_search(self, event: Input.Changed) -> None:
        if self.controller is not None:
            self.controller.set_search(event.value)
            self._refresh_list()

    @on(ListView.Highlighted, "#item-list")
    def handle_item_highlighted(self) -> None:
        entity = self._selected()
        if entity is not None and self.controller is not None:
            output = self.query_one("#output", Markdown)
            output.update(render_markdown(self.controller.descriptor.key, entity))

    # ---------------------------------------------------------------------
    # CREATE / EDIT / DELETE
    # ---------------------------------------------------------------------

    def _ready(self) -> WorkflowController[Any] | None:
        controller = self.controller
        if controller is None or controller.phase is not Phase.IDLE:
            return None
        if controller.confirming_delete is not None:
            return None
        return controller

    def _after_form(self, saved: bool | None) -> None:
        if saved:
            self._refresh_list()

    @on(Button.Pressed, "#btn-new")
    def action_new_item(self) -> None:
        controller = self._ready()
        if controller is None:
            return
        controller.open_create()
        self.push_screen(EntityFormScreen(controller), self._after_form)

    @on(Button.Pressed, "#btn-edit")
    def action_edit_item(self) -> None:
        controller = self._ready()
        entity = self._selected()
        if controller is None or entity is None:
            return
        controller.open_edit(entity)
        self.push_screen(EntityFormScreen(controller), self._after_form)

    @on(Button.Pressed, "#btn-delete")
    def action_delete_item(self) -> None:
        controller = self._ready()
        entity = self._selected()
        if controller is None or entity is None:
            return
        controller.request_delete(controller.descriptor.entity_key(entity))
        noun = controller.descriptor.singular.lower()
        self.push_screen(
            ConfirmScreen(f"Are you sure you want to delete this {noun}?"),
            self._after_confirm,
        )

    def _after_confirm(self, confirmed: bool | None) -> None:
        controller = self.controller
        if controller is None:
            return
        if not confirmed:
            controller.dismiss_delete()
            return
        self.run_worker(self._delete(controller), group="section", exclusive=True)

    async def _delete(self, controller: WorkflowController[Any]) -> None:
        if not await controller.confirm_delete():
            # The failed confirmation is closed here; retrying means pressing Delete again.
            controller.dismiss_delete()
        self._refresh_list()

    # ---------------------------------------------------------------------
    # USER DETAILS
    # ---------------------------------------------------------------------

    async def _open_user_details(self) -> None:
        controller = UserDetailsController(self.api.user_details, notifier=self._notifier)
        await controller.load()
        self.query_one("#output", Markdown).update(
            render_user_details_markdown(controller.details)
        )

        def after(saved: bool | None) -> None:
            if saved:
                self.query_one("#output", Markdown).update(
                    render_user_details_markdown(controller.details)
                )

        self.push_screen(UserDetailsScreen(controller), after)


def main() -> None:
    PortfolioCMSApp().run()

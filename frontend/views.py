import logging
import tkinter as tk
from tkinter import messagebox, ttk

from frontend import forms
from frontend.api import ApiClient, ApiError, AuthApi, DonorProfilesApi, UsersApi
from frontend.session import Session

logger = logging.getLogger(__name__)

SUCCESS_COLOR = '#2b7a0b'
ERROR_COLOR = '#b00020'


class BloodLinkApp(tk.Tk):
    """Main window; swaps one view frame at a time."""

    def __init__(self, client=None):
        super().__init__()
        self.title('BloodLink')
        self.geometry('480x560')

        self.client = client or ApiClient()
        self.auth_api = AuthApi(self.client)
        self.users_api = UsersApi(self.client)
        self.donor_profiles_api = DonorProfilesApi(self.client)
        self.session = Session()

        self.current_view = None
        self.show(LoginView)

    def show(self, view_class):
        if getattr(view_class, 'requires_login', False) and not self.session.is_authenticated:
            view_class = LoginView
        if self.current_view is not None:
            self.current_view.destroy()
        self.current_view = view_class(self)
        self.current_view.pack(fill='both', expand=True, padx=24, pady=24)
        logger.debug(f"Showing {view_class.__name__}")

    def alert(self, title, message):
        messagebox.showinfo(title, message, parent=self)

    def start_session(self, login_payload, fallback_user=None):
        self.session.start_from_login(login_payload, self.auth_api, self.users_api, fallback_user=fallback_user)


def _labeled_entry(parent, label, row, show=None):
    ttk.Label(parent, text=label).grid(row=row, column=0, sticky='w', pady=4)
    entry = ttk.Entry(parent, show=show, width=32)
    entry.grid(row=row, column=1, sticky='ew', pady=4)
    return entry


def _labeled_combo(parent, label, row, values):
    ttk.Label(parent, text=label).grid(row=row, column=0, sticky='w', pady=4)
    combo = ttk.Combobox(parent, values=values, state='readonly', width=30)
    combo.grid(row=row, column=1, sticky='ew', pady=4)
    return combo


class LoginView(ttk.Frame):
    def __init__(self, app):
        super().__init__(app)
        self.app = app

        ttk.Label(self, text='Log In', font=('TkDefaultFont', 16, 'bold')).grid(row=0, column=0, columnspan=2, pady=12)
        self.email_entry = _labeled_entry(self, 'Email', 1)
        self.password_entry = _labeled_entry(self, 'Password', 2, show='*')

        ttk.Button(self, text='Log In', command=self.handle_login).grid(row=3, column=0, columnspan=2, pady=12)
        ttk.Button(self, text='Create an account', command=lambda: app.show(SignUpView)).grid(row=4, column=0, columnspan=2)

    def handle_login(self):
        try:
            email, password = forms.validate_login(self.email_entry.get(), self.password_entry.get())
        except forms.FormError as e:
            self.app.alert('Error', str(e))
            return

        payload = self.app.auth_api.login(email, password)
        if payload is None:
            self.app.alert('Error', 'Invalid credentials or login failed.')
            return

        self.app.start_session(payload)
        self.app.alert('Success', 'Login successful!')
        self.app.show(DashboardView)


class SignUpView(ttk.Frame):
    def __init__(self, app):
        super().__init__(app)
        self.app = app

        ttk.Label(self, text='Sign Up', font=('TkDefaultFont', 16, 'bold')).grid(row=0, column=0, columnspan=2, pady=12)
        self.full_name_entry = _labeled_entry(self, 'Full name', 1)
        self.email_entry = _labeled_entry(self, 'Email', 2)
        self.phone_entry = _labeled_entry(self, 'Phone', 3)
        self.password_entry = _labeled_entry(self, 'Password', 4, show='*')
        self.home_address_entry = _labeled_entry(self, 'Home address', 5)
        self.blood_type_combo = _labeled_combo(self, 'Blood type', 6, forms.BLOOD_TYPES)
        self.rhesus_combo = _labeled_combo(self, 'Rhesus', 7, forms.RHESUS_FACTORS)

        ttk.Button(self, text='Sign Up', command=self.handle_sign_up).grid(row=8, column=0, columnspan=2, pady=12)
        ttk.Button(self, text='Back to log in', command=lambda: app.show(LoginView)).grid(row=9, column=0, columnspan=2)

    def handle_sign_up(self):
        try:
            user, password = forms.validate_sign_up(
                self.full_name_entry.get(),
                self.email_entry.get(),
                self.phone_entry.get(),
                self.password_entry.get(),
                self.home_address_entry.get(),
                self.blood_type_combo.get() or None,
                self.rhesus_combo.get() or None,
            )
        except forms.FormError as e:
            self.app.alert('Error', str(e))
            return

        try:
            self.app.auth_api.register(user, password)
        except ApiError as e:
            if e.status_code == 400 and 'already registered' in str(e):
                self.app.alert('Error', 'Registration failed. Email already registered.')
            elif e.status_code == -1:
                self.app.alert('Error', f'Unexpected error occurred: {e}')
            else:
                self.app.alert('Error', f'Registration failed. {e}')
            return

        payload = self.app.auth_api.login(user.email, password)
        if payload is None:
            self.app.alert('Error', 'Account created, but auto-login failed. Please log in manually.')
            self.app.show(LoginView)
            return

        self.app.start_session(payload, fallback_user=user)
        self.app.show(DashboardView)


class DashboardView(ttk.Frame):
    requires_login = True

    def __init__(self, app):
        super().__init__(app)
        self.app = app

        user = app.session.current_user
        greeting = f'Welcome, {user.full_name}' if user and user.full_name else 'Welcome'
        ttk.Label(self, text=greeting, font=('TkDefaultFont', 16, 'bold')).pack(pady=12)
        ttk.Label(self, text='How would you like to take part?').pack(pady=4)

        ttk.Button(self, text='I want to donate', command=self.select_donor).pack(fill='x', pady=6)
        ttk.Button(self, text='I need blood', command=self.select_recipient).pack(fill='x', pady=6)
        ttk.Button(self, text='Log out', command=self.handle_logout).pack(fill='x', pady=18)

    def select_donor(self):
        self.app.show(DonorProfileView)

    def select_recipient(self):
        logger.info("Role selected: RECIPIENT")

    def handle_logout(self):
        self.app.session.clear()
        logger.info("User logged out")
        self.app.show(LoginView)


class DonorProfileView(ttk.Frame):
    requires_login = True

    def __init__(self, app):
        super().__init__(app)
        self.app = app

        ttk.Label(self, text='Donor Profile', font=('TkDefaultFont', 16, 'bold')).grid(row=0, column=0, columnspan=2, pady=12)
        self.donor_id_entry = _labeled_entry(self, 'Donor ID', 1)
        self.blood_type_combo = _labeled_combo(self, 'Blood type', 2, forms.BLOOD_TYPES)
        self.rhesus_combo = _labeled_combo(self, 'Rhesus', 3, forms.RHESUS_FACTORS)
        self.availability_combo = _labeled_combo(self, 'Availability', 4, forms.AVAILABILITY_OPTIONS)
        self.date_of_birth_entry = _labeled_entry(self, 'Date of birth (YYYY-MM-DD)', 5)
        self.dnd_date_entry = _labeled_entry(self, 'Do not disturb until (date)', 6)
        self.dnd_time_entry = _labeled_entry(self, 'Do not disturb until (HH:MM)', 7)
        self.available_by_date_entry = _labeled_entry(self, 'Available by (date)', 8)
        self.available_by_time_entry = _labeled_entry(self, 'Available by (HH:MM)', 9)
        self.last_donation_entry = _labeled_entry(self, 'Last donation (date)', 10)
        self.home_address_entry = _labeled_entry(self, 'Home address', 11)

        ttk.Label(self, text='Preferred radius').grid(row=12, column=0, sticky='w', pady=4)
        self.radius_var = tk.DoubleVar(value=10)
        self.radius_label = ttk.Label(self, text=forms.format_radius(self.radius_var.get()))
        ttk.Scale(self, from_=1, to=100, variable=self.radius_var,
                  command=lambda value: self.radius_label.config(text=forms.format_radius(value))
                  ).grid(row=12, column=1, sticky='ew', pady=4)
        self.radius_label.grid(row=13, column=1, sticky='e')

        self.status_label = tk.Label(self, text='')
        self.status_label.grid(row=14, column=0, columnspan=2, pady=8)

        ttk.Button(self, text='Submit', command=self.handle_submit).grid(row=15, column=0, pady=8)
        ttk.Button(self, text='Back', command=lambda: app.show(DashboardView)).grid(row=15, column=1, pady=8)

        self.prefill_from_session()

    def prefill_from_session(self):
        user = self.app.session.current_user
        if user is None:
            return
        if user.user_id is not None:
            self.donor_id_entry.insert(0, str(user.user_id))
        if user.blood_type in forms.BLOOD_TYPES:
            self.blood_type_combo.set(user.blood_type)
        if user.rhesus in forms.RHESUS_FACTORS:
            self.rhesus_combo.set(user.rhesus)
        if user.home_address:
            self.home_address_entry.insert(0, user.home_address)

    def set_status(self, message, success):
        self.status_label.config(text=message, fg=SUCCESS_COLOR if success else ERROR_COLOR)

    def handle_submit(self):
        self.status_label.config(text='')
        try:
            form = forms.validate_donor_profile(
                self.donor_id_entry.get(),
                self.blood_type_combo.get() or None,
                self.rhesus_combo.get() or None,
                self.availability_combo.get() or None,
                self.home_address_entry.get(),
                radius_km=self.radius_var.get(),
                date_of_birth=self.date_of_birth_entry.get(),
                dnd_date=self.dnd_date_entry.get(),
                dnd_time=self.dnd_time_entry.get(),
                available_by_date=self.available_by_date_entry.get(),
                available_by_time=self.available_by_time_entry.get(),
                last_donation_date=self.last_donation_entry.get(),
            )
        except forms.FormError as e:
            self.set_status(str(e), False)
            return

        try:
            self.app.donor_profiles_api.submit_profile(form)
        except ApiError as e:
            self.set_status(str(e), False)
            return
        self.set_status('Donor profile submitted successfully.', True)

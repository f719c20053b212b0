# Overview: All authorizable actions.
# Each definition is: (action, description, category)

from enum import Enum


class Action(str, Enum):
    # Categories
    READ_CATEGORY = "READ_CATEGORY"
    CREATE_CATEGORY = "CREATE_CATEGORY"
    UPDATE_CATEGORY = "UPDATE_CATEGORY"
    DELETE_CATEGORY = "DELETE_CATEGORY"

    # Inventory
    READ_STOCK_ITEM = "READ_STOCK_ITEM"
    CREATE_STOCK_ITEM = "CREATE_STOCK_ITEM"
    UPDATE_STOCK_ITEM = "UPDATE_STOCK_ITEM"
    DELETE_STOCK_ITEM = "DELETE_STOCK_ITEM"
    ADJUST_STOCK_ITEM = "ADJUST_STOCK_ITEM"

    # Employees
    READ_EMPLOYEE = "READ_EMPLOYEE"
    CREATE_EMPLOYEE = "CREATE_EMPLOYEE"
    DELETE_EMPLOYEE = "DELETE_EMPLOYEE"

    # Tickets
    READ_TICKET = "READ_TICKET"
    CREATE_TICKET = "CREATE_TICKET"
    UPDATE_TICKET = "UPDATE_TICKET"
    ASSIGN_TECHNICIAN = "ASSIGN_TECHNICIAN"
    DELETE_TICKET = "DELETE_TICKET"
    FILTER_TICKETS_BY_TECHNICIAN = "FILTER_TICKETS_BY_TECHNICIAN"
    READ_TICKET_NOTE = "READ_TICKET_NOTE"
    ADD_TICKET_NOTE = "ADD_TICKET_NOTE"

    # Customers
    READ_CUSTOMER = "READ_CUSTOMER"
    CREATE_CUSTOMER = "CREATE_CUSTOMER"
    UPDATE_CUSTOMER = "UPDATE_CUSTOMER"

    # Sales and refunds
    READ_SALE = "READ_SALE"
    CREATE_SALE = "CREATE_SALE"
    READ_REFUND = "READ_REFUND"
    CREATE_REFUND = "CREATE_REFUND"

    # Stores
    READ_STORE = "READ_STORE"
    CREATE_STORE = "CREATE_STORE"
    UPDATE_STORE = "UPDATE_STORE"
    DELETE_STORE = "DELETE_STORE"

    # Time clock
    USE_TIME_CLOCK = "USE_TIME_CLOCK"
    READ_STORE_TIME_CLOCKS = "READ_STORE_TIME_CLOCKS"


ACTION_DEFINITIONS = [
    (Action.READ_CATEGORY, "View categories", "CATEGORIES"),
    (Action.CREATE_CATEGORY, "Create categories", "CATEGORIES"),
    (Action.UPDATE_CATEGORY, "Rename or describe categories", "CATEGORIES"),
    (Action.DELETE_CATEGORY, "Delete unused categories", "CATEGORIES"),
    (Action.READ_STOCK_ITEM, "View stock items and movements", "INVENTORY"),
    (Action.CREATE_STOCK_ITEM, "Create stock items", "INVENTORY"),
    (Action.UPDATE_STOCK_ITEM, "Edit stock item details", "INVENTORY"),
    (Action.DELETE_STOCK_ITEM, "Delete stock items", "INVENTORY"),
    (Action.ADJUST_STOCK_ITEM, "Append stock movements", "INVENTORY"),
    (Action.READ_EMPLOYEE, "View employees", "EMPLOYEES"),
    (Action.CREATE_EMPLOYEE, "Add employees", "EMPLOYEES"),
    (Action.DELETE_EMPLOYEE, "Deactivate employees", "EMPLOYEES"),
    (Action.READ_TICKET, "View tickets", "TICKETS"),
    (Action.CREATE_TICKET, "Open tickets", "TICKETS"),
    (Action.UPDATE_TICKET, "Edit tickets and change status", "TICKETS"),
    (Action.ASSIGN_TECHNICIAN, "Assign or clear the ticket technician", "TICKETS"),
    (Action.DELETE_TICKET, "Delete tickets that are not completed", "TICKETS"),
    (Action.FILTER_TICKETS_BY_TECHNICIAN, "Filter the ticket list by technician", "TICKETS"),
    (Action.READ_TICKET_NOTE, "View ticket notes", "TICKETS"),
    (Action.ADD_TICKET_NOTE, "Append ticket notes", "TICKETS"),
    (Action.READ_CUSTOMER, "View customers", "CUSTOMERS"),
    (Action.CREATE_CUSTOMER, "Add customers", "CUSTOMERS"),
    (Action.UPDATE_CUSTOMER, "Edit customers", "CUSTOMERS"),
    (Action.READ_SALE, "View sales", "SALES"),
    (Action.CREATE_SALE, "Record sales", "SALES"),
    (Action.READ_REFUND, "View refunds", "SALES"),
    (Action.CREATE_REFUND, "Refund sales", "SALES"),
    (Action.READ_STORE, "View the current store", "STORES"),
    (Action.CREATE_STORE, "Open additional stores", "STORES"),
    (Action.UPDATE_STORE, "Edit store settings", "STORES"),
    (Action.DELETE_STORE, "Delete a store and all of its data", "STORES"),
    (Action.USE_TIME_CLOCK, "Clock in and out", "TIMEKEEPING"),
    (Action.READ_STORE_TIME_CLOCKS, "View time entries for all employees", "TIMEKEEPING"),
]

"""
Order edit GraphQL queries and mutations.

This module contains the operations used to normalize a shipping line:
- Order lookup with its shipping lines
- Order edit session: begin, add shipping line, remove shipping line, commit
"""

# =============================================
# ORDER QUERIES
# =============================================

# Order with up to 10 shipping lines (only the first one is used)
GET_ORDER_SHIPPING_LINES_QUERY = """
query GetOrder($id: ID!) {
  order(id: $id) {
    id
    name
    shippingLines(first: 10) {
      nodes {
        id
        title
        originalPriceSet {
          shopMoney {
            amount
            currencyCode
          }
        }
      }
    }
  }
}
"""

# =============================================
# ORDER EDIT MUTATIONS
# =============================================

ORDER_EDIT_BEGIN_MUTATION = """
mutation Begin($id: ID!) {
  orderEditBegin(id: $id) {
    calculatedOrder {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""

ORDER_EDIT_ADD_SHIPPING_LINE_MUTATION = """
mutation Add($id: ID!, $title: String!, $price: Money!) {
  orderEditAddShippingLine(id: $id, shippingLine: { title: $title, price: $price }) {
    calculatedOrder {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""

ORDER_EDIT_REMOVE_SHIPPING_LINE_MUTATION = """
mutation Remove($id: ID!, $shippingLineId: ID!) {
  orderEditRemoveShippingLine(id: $id, shippingLineId: $shippingLineId) {
    calculatedOrder {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""

# notifyCustomer is always false; the staff note is passed as a variable
ORDER_EDIT_COMMIT_MUTATION = """
mutation Commit($id: ID!, $staffNote: String) {
  orderEditCommit(id: $id, notifyCustomer: false, staffNote: $staffNote) {
    order {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""
